"""
Module: delivery/retry.py
Description: Retry queue for rate-limited turn deliveries.

Persists turns that Notion rate limited and redelivers them in sweeps
over the queue. Each failed re-attempt increments the item's retry
count; the item is abandoned once the count reaches the ceiling for the
outcome (5 for rate limiting, 3 for other failures). Age-based expiry
is left to the store's TTL.

Sweeps take no locks. Concurrent sweeps may redeliver the same item,
so delivery is at-least-once.
"""

from typing import List, Optional

from turn_relay.delivery.notion import NotionDeliveryClient
from turn_relay.exceptions import QueueStorageUnavailable
from turn_relay.models.delivery import DeliveryResult
from turn_relay.models.queue import QueuedItem
from turn_relay.models.response import SweepSummary
from turn_relay.models.turn import TurnEvent
from turn_relay.storage.queue_store import QueueStore
from turn_relay.utils.logger import get_logger
from turn_relay.utils.metrics import MetricsClient

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 86400
RATE_LIMIT_MAX_RETRIES = 5
FAILURE_MAX_RETRIES = 3


class RetryQueueManager:
    """
    Owner of the queued item lifecycle.

    No other component writes queue items. The manager degrades to a
    no-op when no store is configured.
    """

    def __init__(
        self,
        store: Optional[QueueStore],
        delivery_client: NotionDeliveryClient,
        key_prefix: str = "queue:",
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        rate_limit_max_retries: int = RATE_LIMIT_MAX_RETRIES,
        failure_max_retries: int = FAILURE_MAX_RETRIES,
        metrics_client: Optional[MetricsClient] = None
    ):
        self.store = store
        self.delivery_client = delivery_client
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds
        self.rate_limit_max_retries = rate_limit_max_retries
        self.failure_max_retries = failure_max_retries
        self.metrics_client = metrics_client

    @property
    def enabled(self) -> bool:
        return self.store is not None

    def _metric(self, name: str, value: float = 1.0) -> None:
        if self.metrics_client is None:
            return
        try:
            self.metrics_client.put_metric(metric_name=name, value=value)
        except Exception as e:
            logger.warning("Failed to publish metric", metric_name=name, error=str(e))

    def _max_retries(self, result: DeliveryResult) -> int:
        if result.is_rate_limited:
            return self.rate_limit_max_retries
        return self.failure_max_retries

    async def enqueue(self, turn: TurnEvent) -> Optional[QueuedItem]:
        """
        Persist a rate-limited turn for later redelivery.

        Best-effort: storage problems are logged and reported as None,
        never raised to the inbound request.

        Args:
            turn: Turn that Notion rate limited

        Returns:
            The stored QueuedItem, or None if it could not be stored
        """
        if self.store is None:
            logger.warning("Queue store not configured, skipping queue", turn_name=turn.name)
            return None

        item = QueuedItem.create(turn, self.key_prefix)

        try:
            await self.store.put(item.key, item.to_json(), self.ttl_seconds)
        except Exception as e:
            logger.error(
                "Error queuing turn",
                queue_key=item.key,
                error=str(e),
                error_type=type(e).__name__
            )
            return None

        logger.info("Queued turn for retry", queue_key=item.key, turn_name=turn.name)
        self._metric("TurnQueued")

        return item

    async def sweep(self) -> SweepSummary:
        """
        Attempt redelivery of every queued item once.

        A failure on one item is logged and leaves that item as last
        persisted; the remaining items are still processed.

        Returns:
            Counts of what happened to each item
        """
        summary = SweepSummary()

        if self.store is None:
            return summary

        try:
            keys = await self.store.list_keys(self.key_prefix)
        except Exception as e:
            logger.error("Error processing queue", error=str(e), error_type=type(e).__name__)
            summary.errors += 1
            return summary

        if not keys:
            logger.debug("Retry queue empty")
            return summary

        logger.info("Sweeping retry queue", count=len(keys))
        self._metric("QueueDepth", float(len(keys)))

        for key in keys:
            try:
                await self._process_item(key, summary)
            except Exception as e:
                summary.errors += 1
                logger.error(
                    "Error processing queue item",
                    queue_key=key,
                    error=str(e),
                    error_type=type(e).__name__
                )

        logger.info("Retry queue sweep finished", **summary.model_dump())

        return summary

    async def _process_item(self, key: str, summary: SweepSummary) -> None:
        raw = await self.store.get(key)
        if raw is None:
            # Deleted by a concurrent sweep or expired
            summary.skipped += 1
            return

        item = QueuedItem.from_json(raw)
        summary.processed += 1

        result = await self.delivery_client.deliver_turn(item.turn)

        if result.is_delivered:
            await self.store.delete(key)
            summary.delivered += 1
            logger.info(
                "Successfully processed queued item",
                queue_key=key,
                page_id=result.page_id,
                retry_count=item.retry_count
            )
            self._metric("QueueItemDelivered")
            return

        item.retry_count += 1
        max_retries = self._max_retries(result)

        if item.retry_count < max_retries:
            await self.store.put(key, item.to_json(), self.ttl_seconds)
            summary.requeued += 1
            logger.info(
                "Queued item redelivery failed, will retry",
                queue_key=key,
                outcome=result.status.value,
                retry_count=item.retry_count,
                max_retries=max_retries
            )
            return

        await self.store.delete(key)
        summary.abandoned += 1
        logger.error(
            "Max retries reached for queued item",
            queue_key=key,
            outcome=result.status.value,
            retry_count=item.retry_count,
            error=result.error
        )
        self._metric("QueueItemAbandoned")

    async def list_items(self, limit: int = 100) -> List[QueuedItem]:
        """
        Load up to limit queued items, oldest first.

        Raises:
            QueueStorageUnavailable: If no store is configured or it fails
        """
        if self.store is None:
            raise QueueStorageUnavailable("Queue store not configured")

        keys = sorted(await self.store.list_keys(self.key_prefix))
        items = []

        for key in keys[:limit]:
            raw = await self.store.get(key)
            if raw is None:
                continue
            try:
                items.append(QueuedItem.from_json(raw))
            except ValueError as e:
                logger.warning("Unreadable queue item", queue_key=key, error=str(e))

        return items
