"""API routes for csvbridge."""

import logging
import time
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..config import settings
from ..mapping import MappingEdit
from ..wizard import ImportTarget, ImportWizard

logger = logging.getLogger(__name__)

router = APIRouter()

# Active wizard sessions, keyed by session id
sessions: dict[str, ImportWizard] = {}


def get_service():
    """Get the global import service instance."""
    from .app import get_service as _get_service

    return _get_service()


class UploadRequest(BaseModel):
    """A CSV file submitted from the file picker."""

    file_name: str
    content: str
    content_type: Optional[str] = None
    size: Optional[int] = None


class MappingEditsRequest(BaseModel):
    """Draft values from the mapping table."""

    draft_values: list[MappingEdit] = Field(default_factory=list)


class SetMappingRequest(BaseModel):
    """Map one field to one CSV column."""

    header: str


def prune_sessions(now: Optional[float] = None) -> int:
    """Drop sessions idle for longer than the session TTL. Busy sessions are kept."""
    if now is None:
        now = time.monotonic()
    expired = [
        session_id
        for session_id, wizard in sessions.items()
        if not wizard.is_busy and now - wizard.last_active > settings.session_ttl
    ]
    for session_id in expired:
        del sessions[session_id]
    if expired:
        logger.info(f"Expired {len(expired)} idle sessions")
    return len(expired)


def _get_session(session_id: str) -> ImportWizard:
    prune_sessions()
    wizard = sessions.get(session_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    wizard.last_active = time.monotonic()
    return wizard


def _snapshot(wizard: ImportWizard) -> dict:
    return wizard.snapshot().model_dump(mode="json")


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "service": "csvbridge",
        "active_sessions": len(sessions),
        "config": {
            "import_service_url": settings.import_service_url,
            "import_service_token_present": bool(settings.import_service_token),
        },
    }


@router.get("/config/limits")
async def get_limits():
    """Upload limits enforced by the wizard."""
    return {
        "max_file_size": settings.max_file_size,
        "default_max_records": settings.default_max_records,
        "accepted_extensions": [".csv"],
    }


@router.post("/sessions")
async def create_session(target: ImportTarget):
    """Start a wizard session and load its target fields."""
    prune_sessions()
    service = get_service()
    wizard = ImportWizard(target=target, schema_source=service, executor=service)
    await wizard.load_available_fields()
    sessions[wizard.session_id] = wizard
    return _snapshot(wizard)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str):
    """Current state of a session."""
    return _snapshot(_get_session(session_id))


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str):
    """Discard a session."""
    wizard = _get_session(session_id)
    if wizard.is_busy:
        raise HTTPException(status_code=409, detail="An import is in progress")
    del sessions[session_id]
    return {"status": "ok", "session_id": session_id}


@router.post("/sessions/{session_id}/upload")
async def upload_file(session_id: str, request: UploadRequest):
    """Upload a CSV file into the session."""
    wizard = _get_session(session_id)
    await wizard.upload(
        file_name=request.file_name,
        content=request.content,
        content_type=request.content_type,
        size=request.size,
    )
    return _snapshot(wizard)


@router.post("/sessions/{session_id}/next")
async def next_step(session_id: str):
    """Advance the wizard. From mapping this runs the import."""
    wizard = _get_session(session_id)
    await wizard.next()
    return _snapshot(wizard)


@router.post("/sessions/{session_id}/previous")
async def previous_step(session_id: str):
    """Go back one step."""
    wizard = _get_session(session_id)
    wizard.previous()
    return _snapshot(wizard)


@router.post("/sessions/{session_id}/finish")
async def finish(session_id: str):
    """Close out the current file and return to upload."""
    wizard = _get_session(session_id)
    wizard.finish()
    return _snapshot(wizard)


@router.post("/sessions/{session_id}/auto-match")
async def run_auto_match(session_id: str):
    """Re-run auto-matching against the current headers."""
    wizard = _get_session(session_id)
    await wizard.auto_match()
    return _snapshot(wizard)


@router.patch("/sessions/{session_id}/mapping")
async def edit_mapping(session_id: str, request: MappingEditsRequest):
    """Apply draft values from the mapping table."""
    wizard = _get_session(session_id)
    wizard.apply_edits(request.draft_values)
    return _snapshot(wizard)


@router.put("/sessions/{session_id}/mapping/{api_name}")
async def set_mapping(session_id: str, api_name: str, request: SetMappingRequest):
    """Map a single field."""
    wizard = _get_session(session_id)
    wizard.set_mapping(api_name, request.header)
    return _snapshot(wizard)


@router.delete("/sessions/{session_id}/mapping/{api_name}")
async def clear_mapping(session_id: str, api_name: str):
    """Clear a single field's mapping."""
    wizard = _get_session(session_id)
    wizard.clear_mapping(api_name)
    return _snapshot(wizard)
