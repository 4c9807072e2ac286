"""Quote-aware CSV tokenizer for uploaded files.

The tokenizer is intentionally tolerant: it never raises on malformed input.
Quoting is handled by a simple toggle, so a doubled ``""`` inside a quoted
field is not unescaped into a literal quote.
"""

import logging
from typing import Optional

from ..mapping.models import InputRejectedError
from .models import ParsedCsv

logger = logging.getLogger(__name__)

QUOTE = '"'
DELIMITER = ","


def _non_blank_lines(text: str) -> list[str]:
    """Split text on newlines, trimming each line and dropping blank ones."""
    if not text:
        return []
    return [line.strip() for line in text.split("\n") if line.strip()]


def split_line(line: str) -> list[str]:
    """
    Split a single CSV line into raw field values.

    A double quote toggles the in-quotes state and is not kept; a comma
    outside quotes ends the current field. Values are not trimmed here.
    """
    fields = []
    current = []
    in_quotes = False

    for char in line:
        if char == QUOTE:
            in_quotes = not in_quotes
        elif char == DELIMITER and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)

    # Last field is emitted at end of line
    fields.append("".join(current))

    return [_strip_outer_quotes(field) for field in fields]


def _strip_outer_quotes(field: str) -> str:
    """Remove exactly one surrounding pair of quotes, if present."""
    if len(field) >= 2 and field.startswith(QUOTE) and field.endswith(QUOTE):
        return field[1:-1]
    return field


def count_data_rows(text: str) -> int:
    """Count non-blank lines after the header row."""
    lines = _non_blank_lines(text)
    return max(len(lines) - 1, 0)


def check_record_limit(text: str, max_records: Optional[int]) -> int:
    """
    Enforce the maximum number of data rows for an upload.

    Args:
        text: Raw CSV text
        max_records: Maximum allowed data rows, or None for no limit

    Returns:
        The number of data rows found

    Raises:
        InputRejectedError: If the data row count exceeds max_records
    """
    data_rows = count_data_rows(text)
    if max_records is not None and data_rows > max_records:
        logger.warning(f"CSV has {data_rows} data rows, limit is {max_records}")
        raise InputRejectedError(f"CSV file exceeds maximum record limit of {max_records}")
    return data_rows


def tokenize(text: str) -> ParsedCsv:
    """
    Tokenize CSV text into headers and rows.

    The first non-blank line is the header row. Each data row is zipped
    against the headers; short rows are padded with empty strings and
    extra values are ignored.
    """
    lines = _non_blank_lines(text)
    if not lines:
        return ParsedCsv()

    headers = [header.strip() for header in split_line(lines[0])]

    rows = []
    for line in lines[1:]:
        values = split_line(line)
        row = {}
        for index, header in enumerate(headers):
            value = values[index] if index < len(values) else ""
            row[header] = value.strip()
        rows.append(row)

    logger.debug(f"Tokenized CSV: {len(headers)} headers, {len(rows)} rows")
    return ParsedCsv(headers=headers, rows=rows)


class CsvTokenizer:
    """Tokenizer bound to a record limit, used by the import wizard."""

    def __init__(self, max_records: Optional[int] = None):
        self.max_records = max_records

    def parse(self, text: str) -> ParsedCsv:
        """Check the record limit, then tokenize."""
        check_record_limit(text, self.max_records)
        return tokenize(text)
