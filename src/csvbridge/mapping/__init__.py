"""Field mapping: state, auto-matching, cleaning and display projection."""

from .models import (
    NA_SENTINEL,
    NA_LABEL,
    FieldMapping,
    AliasTable,
    CsvRow,
    TargetField,
    MappingOption,
    MappingDisplayRow,
    MappingEdit,
    MatchMethod,
    MatchDecision,
    MatchResult,
    CsvBridgeError,
    InputRejectedError,
    ConfigUnavailableError,
    HeaderNotFoundError,
    NothingMappedError,
    ExecutionFailedError,
)
from .store import MappingStore
from .matcher import AutoMatcher, auto_match, normalize_header, similarity_score
from .validator import MappingValidator, clean_mapping, is_clean
from .display import build_display_rows

__all__ = [
    "NA_SENTINEL",
    "NA_LABEL",
    "FieldMapping",
    "AliasTable",
    "CsvRow",
    "TargetField",
    "MappingOption",
    "MappingDisplayRow",
    "MappingEdit",
    "MatchMethod",
    "MatchDecision",
    "MatchResult",
    "CsvBridgeError",
    "InputRejectedError",
    "ConfigUnavailableError",
    "HeaderNotFoundError",
    "NothingMappedError",
    "ExecutionFailedError",
    "MappingStore",
    "AutoMatcher",
    "auto_match",
    "normalize_header",
    "similarity_score",
    "MappingValidator",
    "clean_mapping",
    "is_clean",
    "build_display_rows",
]
