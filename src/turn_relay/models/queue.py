"""
Module: queue.py
Description: Retry queue entry model.

A QueuedItem wraps a TurnEvent that Notion rate limited, plus the retry
bookkeeping the retry queue manager needs. Items are stored as JSON
under keys of the form <prefix><epoch-millis>:<random suffix>.

Dependencies: pydantic, datetime, uuid
"""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from turn_relay.models.turn import TurnEvent


def generate_queue_key(prefix: str, now: Optional[datetime] = None) -> str:
    """
    Generate a unique queue key.

    Combines the enqueue time in epoch milliseconds with a random
    suffix so concurrent enqueues in the same millisecond never collide.

    Args:
        prefix: Queue key prefix (e.g. 'queue:')
        now: Enqueue time, defaults to current UTC time

    Returns:
        Queue key such as 'queue:1700000000000:3f9a1c2be'
    """
    now = now or datetime.now(timezone.utc)
    return f"{prefix}{int(now.timestamp() * 1000)}:{uuid4().hex[:9]}"


class QueuedItem(BaseModel):
    """
    Persisted turn awaiting redelivery.

    Attributes:
        key: Unique queue key
        turn: The wrapped turn event
        enqueued_at: Time of first queuing
        retry_count: Failed re-attempts so far
    """

    key: str = Field(..., min_length=1, description="Unique queue key")
    turn: TurnEvent = Field(..., description="Turn awaiting delivery")
    enqueued_at: datetime = Field(..., description="Time of first queuing")
    retry_count: int = Field(default=0, ge=0, description="Failed re-attempts")

    @classmethod
    def create(cls, turn: TurnEvent, prefix: str) -> "QueuedItem":
        """Create a fresh item with retry_count=0 under a new key."""
        now = datetime.now(timezone.utc)
        return cls(
            key=generate_queue_key(prefix, now),
            turn=turn,
            enqueued_at=now,
            retry_count=0
        )

    def to_json(self) -> str:
        """Serialize the item for storage."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, raw: str) -> "QueuedItem":
        """Deserialize a stored item."""
        return cls.model_validate_json(raw)
