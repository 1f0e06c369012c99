"""
Module: turns.py
Description: Turn ingestion handler.

Implements POST /turn-resolved: parses the turn, attempts immediate
delivery to Notion, and falls back to the retry queue when Notion rate
limits the request.

Key Components:
- turn_resolved(): Inbound endpoint
- parse_turn(): JSON body to TurnEvent, rejecting malformed payloads
- get_*(): Dependency injection for delivery, queue and metrics clients

Dependencies: FastAPI, models, delivery, storage, config, utils
"""

import json
from typing import Optional, Union

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi import status as status_codes
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from turn_relay.config.settings import settings
from turn_relay.delivery.notion import NotionDeliveryClient
from turn_relay.delivery.retry import RetryQueueManager
from turn_relay.exceptions import DeliveryFailed, MalformedInboundPayload
from turn_relay.models.response import TurnResolvedResponse, error_response
from turn_relay.models.turn import TurnEvent
from turn_relay.storage.queue_store import DynamoDBQueueStore, QueueStore
from turn_relay.utils.logger import get_logger
from turn_relay.utils.metrics import MetricsClient

router = APIRouter(prefix="/turn-resolved", tags=["turns"])
logger = get_logger(__name__)


def get_delivery_client() -> NotionDeliveryClient:
    """
    Dependency to get the Notion delivery client.

    Credentials come from settings; missing ones surface as a failed
    delivery, not as a startup error.
    """
    return NotionDeliveryClient(
        api_key=settings.notion_api_key,
        database_id=settings.notion_database_id,
        api_url=settings.notion_api_url,
        notion_version=settings.notion_version,
        timeout_seconds=settings.delivery_timeout
    )


def get_queue_store() -> Optional[QueueStore]:
    """Dependency to get the retry queue store, or None when not configured."""
    if not settings.queue_table_name:
        return None
    return DynamoDBQueueStore(
        table_name=settings.queue_table_name,
        region_name=settings.aws_region
    )


def get_metrics_client() -> MetricsClient:
    """Dependency to get CloudWatch metrics client."""
    return MetricsClient(
        namespace=settings.metrics_namespace,
        enabled=settings.metrics_enabled,
        region_name=settings.aws_region
    )


def get_retry_manager(
    store: Optional[QueueStore] = Depends(get_queue_store),
    delivery_client: NotionDeliveryClient = Depends(get_delivery_client),
    metrics_client: MetricsClient = Depends(get_metrics_client)
) -> RetryQueueManager:
    """Dependency to get the retry queue manager."""
    return RetryQueueManager(
        store=store,
        delivery_client=delivery_client,
        key_prefix=settings.queue_key_prefix,
        ttl_seconds=settings.queue_ttl_seconds,
        rate_limit_max_retries=settings.rate_limit_max_retries,
        failure_max_retries=settings.failure_max_retries,
        metrics_client=metrics_client
    )


async def parse_turn(request: Request) -> TurnEvent:
    """
    Parse the request body into a TurnEvent.

    Raises:
        MalformedInboundPayload: If the body is not a JSON object or a
            field has the wrong type
    """
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedInboundPayload("Invalid request body") from e

    if not isinstance(data, dict):
        raise MalformedInboundPayload("Invalid request body")

    try:
        return TurnEvent.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(str(err['loc'][0]) for err in e.errors() if err.get('loc'))
        raise MalformedInboundPayload(f"Invalid turn fields: {fields}") from e


@router.post("", response_model=TurnResolvedResponse)
async def turn_resolved(
    request: Request,
    background_tasks: BackgroundTasks,
    delivery_client: NotionDeliveryClient = Depends(get_delivery_client),
    retry_manager: RetryQueueManager = Depends(get_retry_manager),
    metrics_client: MetricsClient = Depends(get_metrics_client)
) -> Union[TurnResolvedResponse, JSONResponse]:
    """
    Relay a resolved turn to Notion.

    Attempts delivery once. When Notion rate limits the request, the turn
    is queued and a sweep of the retry queue is scheduled to run after
    the response is sent. Other delivery failures are returned to the
    caller and never queued.

    Returns:
        200 TurnResolvedResponse when delivered
        202 TurnResolvedResponse with queued=true when rate limited

    Error responses:
        400 if the body is not a JSON object
        500 if delivery failed or an unexpected error occurred

    Example:
        POST /turn-resolved
        {"name": "Turn 12", "status": "Resolved", "description": "Player 2 wins"}

        Response (200):
        {"success": true, "message": "Turn data synced to Notion", "page_id": "...", "queued": false}
    """
    try:
        turn = await parse_turn(request)

        logger.info(
            "Turn received",
            turn_name=turn.name,
            has_status=bool(turn.status),
            has_description=bool(turn.description)
        )

        result = await delivery_client.deliver_turn(turn)

        if result.is_delivered:
            try:
                metrics_client.put_metric(metric_name="TurnDelivered", value=1.0)
            except Exception:
                # Metrics failure shouldn't break delivery
                pass

            return TurnResolvedResponse(
                message="Turn data synced to Notion",
                page_id=result.page_id
            )

        if result.is_rate_limited:
            await retry_manager.enqueue(turn)
            background_tasks.add_task(retry_manager.sweep)

            response = TurnResolvedResponse(
                message="Turn data queued due to rate limiting",
                queued=True
            )
            return JSONResponse(
                content=response.model_dump(mode='json'),
                status_code=status_codes.HTTP_202_ACCEPTED
            )

        try:
            metrics_client.put_metric(metric_name="TurnDeliveryFailed", value=1.0)
        except Exception:
            pass

        raise DeliveryFailed(result.error or "Failed to write to Notion")

    except MalformedInboundPayload as e:
        logger.warning("Rejected malformed turn payload", error=str(e))
        return error_response(
            status_codes.HTTP_400_BAD_REQUEST,
            str(e),
            "malformed_payload"
        )

    except DeliveryFailed as e:
        logger.error("Turn delivery failed", error=e.reason)
        return error_response(
            status_codes.HTTP_500_INTERNAL_SERVER_ERROR,
            e.reason,
            "delivery_failed"
        )

    except Exception as e:
        logger.error(
            "Error handling turn-resolved",
            error=str(e),
            error_type=type(e).__name__
        )
        return error_response(
            status_codes.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            "internal_error"
        )
