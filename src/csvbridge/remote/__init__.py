"""Remote collaborators: schema discovery and import execution."""

from .base import ImportExecutor, ImportRequest, ImportResult, SchemaSource
from .http_client import HttpImportService, get_error_message
from .static import StaticSchemaSource

__all__ = [
    "ImportExecutor",
    "ImportRequest",
    "ImportResult",
    "SchemaSource",
    "HttpImportService",
    "get_error_message",
    "StaticSchemaSource",
]
