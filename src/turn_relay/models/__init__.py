"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains all data models used by the Turn Relay:
- TurnEvent: Inbound "turn resolved" record
- QueuedItem: Retry queue entry wrapping a TurnEvent
- DeliveryResult: Outcome of one Notion delivery attempt
- Response models for the HTTP API

All models are exported here for convenient importing.
"""

from .turn import TurnEvent
from .queue import QueuedItem, generate_queue_key
from .delivery import DeliveryResult, DeliveryStatus
from .response import (
    ErrorResponse,
    QueuedItemResponse,
    SweepSummary,
    TurnResolvedResponse,
    error_response,
)

__all__ = [
    "TurnEvent",
    "QueuedItem",
    "generate_queue_key",
    "DeliveryResult",
    "DeliveryStatus",
    "TurnResolvedResponse",
    "QueuedItemResponse",
    "SweepSummary",
    "ErrorResponse",
    "error_response",
]
