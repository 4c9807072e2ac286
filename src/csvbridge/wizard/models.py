"""Session state and notification models for the import wizard."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..mapping.models import AliasTable, FieldMapping, MappingDisplayRow, TargetField
from ..remote.base import ImportResult


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class WizardStep(str, Enum):
    """Steps of the import wizard."""

    UPLOAD = "upload"
    MAPPING = "mapping"
    PROCESSING = "processing"
    SUMMARY = "summary"


class NotificationVariant(str, Enum):
    """Severity of a user-facing notification."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """A transient message shown to the user."""

    title: str
    message: str
    variant: NotificationVariant
    created_at: datetime = Field(default_factory=_utc_now)


class ImportTarget(BaseModel):
    """Where imported records go, and how many may be imported at once."""

    model_config = ConfigDict(populate_by_name=True)

    parent_record_id: Optional[str] = Field(default=None, alias="recordId")
    parent_field_reference: Optional[str] = Field(default=None, alias="parentFieldReference")
    object_to_create: Optional[str] = Field(default=None, alias="objectToCreate")
    mapping_metadata_object: Optional[str] = Field(default=None, alias="mappingMetadataObject")
    max_records: Optional[int] = Field(default=None, alias="maxRecords")


@dataclass
class SessionState:
    """Mutable cross-step state owned by one wizard session."""

    step: WizardStep = WizardStep.UPLOAD
    show_previous: bool = False
    is_processing: bool = False
    # Set while the upload -> mapping transition or an auto-match is awaiting discovery
    is_loading: bool = False

    # File-derived state, replaced on every upload and cleared on finish
    file_name: str = ""
    file_content: str = ""
    rows: list[dict[str, str]] = field(default_factory=list)
    import_result: Optional[ImportResult] = None

    # Schema-derived state, kept for the whole session
    available_fields: list[TargetField] = field(default_factory=list)
    default_mapping: FieldMapping = field(default_factory=dict)
    alias_table: Optional[AliasTable] = None

    def clear_file(self):
        """Forget everything derived from the uploaded file."""
        self.file_name = ""
        self.file_content = ""
        self.rows = []
        self.import_result = None


class WizardSnapshot(BaseModel):
    """Serializable view of a wizard session."""

    session_id: str
    step: WizardStep
    show_previous: bool
    can_go_next: bool
    is_processing: bool
    is_loading: bool
    file_name: str
    headers: list[str]
    row_count: int
    mapping: FieldMapping
    display_rows: list[MappingDisplayRow]
    import_result: Optional[dict[str, Any]] = None
    status_text: Optional[str] = None
    notifications: list[Notification] = Field(default_factory=list)
    debug_info: dict[str, int] = Field(default_factory=dict)
