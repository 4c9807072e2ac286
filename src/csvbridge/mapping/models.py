"""Data models for CSV column to target field mapping."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

# Reserved option value meaning "do not map this field"
NA_SENTINEL = "N/A"
NA_LABEL = "-- N/A --"

# Type aliases used across the package
FieldMapping = dict[str, str]  # target field api name -> CSV header
AliasTable = dict[str, list[str]]  # target field api name -> known header aliases
CsvRow = dict[str, str]  # CSV header -> cell value


class TargetField(BaseModel):
    """A destination schema field that CSV data may be mapped into."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    api_name: str = Field(alias="apiName")
    label: str


class MappingOption(BaseModel):
    """A selectable choice in the CSV column picker."""

    label: str
    value: str


class MappingDisplayRow(BaseModel):
    """One row of the mapping table, derived from mapping + headers + fields."""

    model_config = ConfigDict(populate_by_name=True)

    api_name: str = Field(alias="apiName")
    label: str
    mapped_to: str = Field(default="", alias="mappedTo")
    options: list[MappingOption] = Field(default_factory=list)


class MappingEdit(BaseModel):
    """A draft value submitted from the mapping table."""

    model_config = ConfigDict(populate_by_name=True)

    api_name: str = Field(alias="apiName")
    mapped_to: Optional[str] = Field(default=None, alias="mappedTo")


class MatchMethod(str, Enum):
    """How the auto-matcher arrived at a column."""

    ALIAS = "alias"  # Known alias, exact or normalized
    SIMILARITY = "similarity"  # Fuzzy name similarity


class MatchDecision(BaseModel):
    """A single accepted auto-match."""

    api_name: str
    header: str
    method: MatchMethod
    score: float = 1.0
    alias: Optional[str] = None

    def describe(self) -> str:
        """Human-readable description for logs."""
        if self.method == MatchMethod.ALIAS:
            return f'Direct match found: {self.api_name} -> "{self.header}"'
        return f'Similarity match: {self.api_name} -> "{self.header}" (score: {self.score:.2f})'


class MatchResult(BaseModel):
    """Outcome of an auto-match run."""

    mapping: FieldMapping = Field(default_factory=dict)
    decisions: list[MatchDecision] = Field(default_factory=list)
    total_fields: int = 0

    @property
    def matched_count(self) -> int:
        return len(self.mapping)


class CsvBridgeError(Exception):
    """Base class for all csvbridge errors."""

    pass


class InputRejectedError(CsvBridgeError):
    """Raised when an uploaded file is oversized, not CSV, or over the record limit."""

    pass


class ConfigUnavailableError(CsvBridgeError):
    """Raised when schema, default mapping, or alias discovery fails."""

    pass


class HeaderNotFoundError(CsvBridgeError):
    """Raised when a mapping edit references a header not in the current file."""

    def __init__(self, header: str):
        self.header = header
        super().__init__(f'CSV column "{header}" not found in uploaded file')


class NothingMappedError(CsvBridgeError):
    """Raised when there are no usable mapping entries."""

    pass


class ExecutionFailedError(CsvBridgeError):
    """Raised when the import executor fails or reports an unsuccessful import."""

    pass
