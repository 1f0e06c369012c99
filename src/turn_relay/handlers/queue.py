"""
Module: queue.py
Description: Retry queue inspection and manual sweep endpoints.

Sweeps otherwise run only after a turn gets queued; POST /queue/sweep
lets an operator drain stale items without waiting for new traffic.

Key Components:
- get_queue(): List queued items, oldest first
- sweep_queue(): Run one sweep and report its counts
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi import status as status_codes

from turn_relay.delivery.retry import RetryQueueManager
from turn_relay.exceptions import QueueStorageUnavailable
from turn_relay.handlers.turns import get_retry_manager
from turn_relay.models.response import QueuedItemResponse, SweepSummary
from turn_relay.utils.logger import get_logger

router = APIRouter(prefix="/queue", tags=["queue"])
logger = get_logger(__name__)


@router.get("", response_model=List[QueuedItemResponse])
async def get_queue(
    limit: int = 100,
    retry_manager: RetryQueueManager = Depends(get_retry_manager)
) -> List[QueuedItemResponse]:
    """
    List queued turns.

    Args:
        limit: Maximum number of items to return (1-100)

    Raises:
        HTTPException: 400 if invalid limit
        HTTPException: 503 if the queue store is not configured or failing
    """
    if limit < 1 or limit > 100:
        raise HTTPException(
            status_code=status_codes.HTTP_400_BAD_REQUEST,
            detail="Limit must be between 1 and 100"
        )

    try:
        items = await retry_manager.list_items(limit=limit)
    except QueueStorageUnavailable as e:
        logger.error("Failed to retrieve queue", error=str(e))
        raise HTTPException(
            status_code=status_codes.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Retry queue unavailable"
        )

    logger.info("Queue retrieved", count=len(items), limit=limit)

    return [
        QueuedItemResponse(
            key=item.key,
            name=item.turn.name,
            status=item.turn.status,
            enqueued_at=item.enqueued_at,
            retry_count=item.retry_count
        )
        for item in items
    ]


@router.post("/sweep", response_model=SweepSummary)
async def sweep_queue(
    retry_manager: RetryQueueManager = Depends(get_retry_manager)
) -> SweepSummary:
    """
    Run one sweep over the retry queue and wait for it to finish.

    Raises:
        HTTPException: 503 if the queue store is not configured
    """
    if not retry_manager.enabled:
        raise HTTPException(
            status_code=status_codes.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Retry queue unavailable"
        )

    summary = await retry_manager.sweep()

    logger.info("Manual sweep finished", **summary.model_dump())

    return summary
