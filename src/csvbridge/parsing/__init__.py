"""Tolerant CSV tokenizing for uploaded files."""

from .models import ParsedCsv
from .tokenizer import (
    CsvTokenizer,
    tokenize,
    split_line,
    count_data_rows,
    check_record_limit,
)

__all__ = [
    "ParsedCsv",
    "CsvTokenizer",
    "tokenize",
    "split_line",
    "count_data_rows",
    "check_record_limit",
]
