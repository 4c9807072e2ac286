"""Data models for tokenized CSV content."""

from pydantic import BaseModel, Field


class ParsedCsv(BaseModel):
    """Header row and data rows of a tokenized CSV file."""

    headers: list[str] = Field(default_factory=list)
    rows: list[dict[str, str]] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.headers

    @property
    def row_count(self) -> int:
        return len(self.rows)
