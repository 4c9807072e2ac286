"""Interfaces and payloads for the remote schema source and import executor."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..mapping.models import AliasTable, FieldMapping, TargetField


class ImportRequest(BaseModel):
    """Everything the executor needs to create records from the upload."""

    model_config = ConfigDict(populate_by_name=True)

    parent_record_id: Optional[str] = Field(default=None, alias="parentRecordId")
    parent_field_api_name: Optional[str] = Field(default=None, alias="parentFieldApiName")
    target_object_api_name: Optional[str] = Field(default=None, alias="targetObjectApiName")
    mapping_metadata_reference: Optional[str] = Field(
        default=None, alias="mappingMetadataReference"
    )
    raw_csv_text: str = Field(alias="rawCsvText")
    file_name: str = Field(alias="fileName")
    rows: list[dict[str, str]] = Field(default_factory=list)
    mapping: FieldMapping = Field(default_factory=dict)

    def to_payload(self) -> dict:
        """Serialize using the wire (camelCase) names."""
        return self.model_dump(by_alias=True)


class ImportResult(BaseModel):
    """Executor outcome. Per-row detail beyond the known fields is kept as-is."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    success: bool
    records_created: int = Field(default=0, alias="recordsCreated")
    errors: list[Any] = Field(default_factory=list)


class SchemaSource(ABC):
    """Supplies target fields, default mappings and alias tables."""

    @abstractmethod
    async def get_available_fields(
        self, object_to_create: Optional[str], mapping_metadata_object: Optional[str]
    ) -> list[TargetField]:
        """Return the ordered target fields for the object being created."""
        pass

    @abstractmethod
    async def get_default_mapping(self, mapping_metadata_object: Optional[str]) -> FieldMapping:
        """Return a suggested api name -> header mapping."""
        pass

    @abstractmethod
    async def get_alias_table(self, mapping_metadata_object: Optional[str]) -> AliasTable:
        """Return known header aliases keyed by api name."""
        pass


class ImportExecutor(ABC):
    """Creates records from a validated upload."""

    @abstractmethod
    async def execute(self, request: ImportRequest) -> ImportResult:
        """Run the import and report its outcome."""
        pass
