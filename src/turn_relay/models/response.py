"""
Module: response.py
Description: API response models for the Turn Relay.

Defines the JSON bodies returned by the turn and queue endpoints.

Dependencies: pydantic, datetime, typing
"""

from datetime import datetime
from typing import Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class TurnResolvedResponse(BaseModel):
    """
    Response to POST /turn-resolved.

    Returned with 200 when the turn was synced and 202 when it was
    queued because Notion rate limited the request.
    """

    success: bool = Field(default=True, description="Request accepted")
    message: str = Field(..., description="Human-readable status message")
    page_id: Optional[str] = Field(default=None, description="Created Notion page ID")
    queued: bool = Field(default=False, description="Turn was queued for retry")


class QueuedItemResponse(BaseModel):
    """Summary of one queued item for GET /queue."""

    key: str
    name: Optional[str] = None
    status: Optional[str] = None
    enqueued_at: datetime
    retry_count: int


class SweepSummary(BaseModel):
    """Counts from one pass over the retry queue."""

    processed: int = 0
    delivered: int = 0
    requeued: int = 0
    abandoned: int = 0
    skipped: int = 0
    errors: int = 0


class ErrorDetail(BaseModel):
    """Error body content."""

    code: int
    message: str
    type: str


class ErrorResponse(BaseModel):
    """Structured error body shared by all endpoints."""

    error: ErrorDetail


def error_response(code: int, message: str, error_type: str) -> JSONResponse:
    """Build the structured JSON error response."""
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, type=error_type))
    return JSONResponse(status_code=code, content=body.model_dump())
