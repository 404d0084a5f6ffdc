"""Upload endpoint: runs the full conversion pipeline for a posted file."""
from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, File, Header, UploadFile
from fastapi.responses import JSONResponse

from restyle.models import UploadRequest
from restyle.services import errors
from restyle.services.orchestrator import ConversionOrchestrator, get_orchestrator

router = APIRouter()
logger = logging.getLogger(__name__)

_STATUS_BY_KIND: dict[str, int] = {
    cls.__name__: cls.status_code
    for cls in (
        errors.ConversionPipelineError,
        errors.TooLargeError,
        errors.DecodeError,
        errors.UnsupportedTypeError,
        errors.StagingError,
        errors.AvailabilityTimeoutError,
        errors.ConversionError,
        errors.InvalidResponseError,
        errors.ConversionInProgressError,
    )
}


@router.post("/uploads")
async def create_upload(
    file: UploadFile = File(...),
    x_session_id: str | None = Header(None, alias="X-Session-Id"),
    orchestrator: ConversionOrchestrator = Depends(get_orchestrator),
):
    raw = await file.read()
    upload = UploadRequest(
        raw_bytes=raw,
        mime_type=file.content_type or "",
        size_bytes=file.size if file.size is not None else len(raw),
        filename=file.filename,
    )
    # Callers without a session id never share the single-flight slot
    session_id = x_session_id or f"anonymous-{uuid.uuid4().hex}"
    state = await orchestrator.convert(upload, session_id=session_id)

    body = {
        "status": "completed" if state.succeeded else "failed",
        "progress": [event.message for event in state.events],
        "source_url": state.result.source_url if state.result else None,
        "output_urls": state.result.output_urls if state.result else [],
        "error": state.error,
        "error_kind": state.error_kind,
    }
    if state.succeeded:
        return body
    return JSONResponse(body, status_code=_STATUS_BY_KIND.get(state.error_kind or "", 500))
