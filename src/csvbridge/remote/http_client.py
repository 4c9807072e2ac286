"""HTTP client for the remote import service."""

import json
import logging
from typing import Any, Optional

import httpx

from ..config import settings
from ..mapping.models import AliasTable, FieldMapping, TargetField
from .base import ImportExecutor, ImportRequest, ImportResult, SchemaSource

logger = logging.getLogger(__name__)


def get_error_message(error: Any) -> str:
    """Extract a readable message from a remote or local failure."""
    if isinstance(error, str):
        return error

    if isinstance(error, httpx.HTTPStatusError):
        try:
            body = error.response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("message"), str):
            return body["message"]

    body = getattr(error, "body", None)
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]

    if isinstance(error, BaseException) and str(error):
        return str(error)

    try:
        return json.dumps(error, default=str)
    except (TypeError, ValueError):
        return repr(error)


class HttpImportService(SchemaSource, ImportExecutor):
    """Talks to the import service for schema discovery and record creation."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.import_service_url).rstrip("/")
        self.token = token if token is not None else settings.import_service_token
        self.timeout = timeout or settings.import_service_timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "X-Client": "csvbridge"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers=self._headers(),
            transport=self._transport,
        ) as client:
            response = await client.request(method, path, **kwargs)
            response.raise_for_status()
            return response.json()

    async def get_available_fields(
        self, object_to_create: Optional[str], mapping_metadata_object: Optional[str]
    ) -> list[TargetField]:
        """Fetch target fields (``[{apiName, label}, ...]``)."""
        logger.info(
            f"Loading available fields for {object_to_create} "
            f"(mapping metadata: {mapping_metadata_object})"
        )
        data = await self._request(
            "GET",
            "/fields",
            params=_drop_none(
                {
                    "objectToCreate": object_to_create,
                    "mappingMetadataObject": mapping_metadata_object,
                }
            ),
        )
        fields = [TargetField.model_validate(item) for item in data or []]
        logger.info(f"Available fields loaded: {len(fields)}")
        return fields

    async def get_default_mapping(self, mapping_metadata_object: Optional[str]) -> FieldMapping:
        """Fetch the suggested default mapping."""
        data = await self._request(
            "GET",
            "/default-mapping",
            params=_drop_none({"mappingMetadataObject": mapping_metadata_object}),
        )
        return {str(k): str(v) for k, v in (data or {}).items() if v is not None}

    async def get_alias_table(self, mapping_metadata_object: Optional[str]) -> AliasTable:
        """Fetch known header aliases per field."""
        data = await self._request(
            "GET",
            "/aliases",
            params=_drop_none({"mappingMetadataObject": mapping_metadata_object}),
        )
        table = {str(k): [str(alias) for alias in (v or [])] for k, v in (data or {}).items()}
        logger.info(f"Alias table loaded for {len(table)} fields")
        return table

    async def execute(self, request: ImportRequest) -> ImportResult:
        """Submit rows and the cleaned mapping for record creation."""
        logger.info(
            f"Submitting import of {len(request.rows)} rows from {request.file_name} "
            f"with {len(request.mapping)} mapped fields"
        )
        data = await self._request("POST", "/imports", json=request.to_payload())
        return ImportResult.model_validate(data)


def _drop_none(params: dict) -> dict:
    return {k: v for k, v in params.items() if v is not None}
