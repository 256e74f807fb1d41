"""
Frame extraction API routes.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from backend.src.core.exceptions import CLIENT_ERROR_KINDS
from backend.src.core.value_objects.extraction_outcome import ExtractionFailure, ExtractionSuccess
from backend.src.application.extract_frames_service import SUCCESS_MESSAGE

logger = logging.getLogger(__name__)

router = APIRouter()


class ExtractFramesResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = SUCCESS_MESSAGE
    frame_count: int = Field(alias="frameCount", ge=0)
    output_path: str = Field(alias="outputPath")


class ErrorResponse(BaseModel):
    error: str
    kind: str
    detail: Optional[str] = None


def error_response(kind: str, message: str, detail: Optional[str] = None) -> JSONResponse:
    """Structured ``{"error", "kind"[, "detail"]}`` body; 400 for client errors, else 500."""
    status_code = 400 if kind in CLIENT_ERROR_KINDS else 500
    body = ErrorResponse(error=message, kind=kind, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def failure_response(failure: ExtractionFailure) -> JSONResponse:
    return error_response(failure.kind, failure.message, failure.detail)


@router.post(
    "/extract-frames",
    response_model=ExtractFramesResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def extract_frames(request: Request):
    """Upload a video and sample it into still frames inside a mount.

    Multipart fields: ``video`` (file), ``mountPoint``, optional ``subFolder``.
    """
    container = request.app.state.container
    receiver = container.upload_receiver()

    # Early rejection before the multipart body is buffered
    receiver.check_declared_length(request.headers.get("content-length"))

    form = await request.form()
    try:
        extraction_request = receiver.parse(form)
        outcome = await container.extract_frames_service().execute(extraction_request)
    finally:
        await form.close()

    if isinstance(outcome, ExtractionSuccess):
        return ExtractFramesResponse(frame_count=outcome.frame_count, output_path=outcome.output_path)
    return failure_response(outcome)
