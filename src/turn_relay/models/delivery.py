"""
Module: delivery.py
Description: Outcome model for a single Notion delivery attempt.

Key Components:
- DeliveryStatus: delivered, rate_limited, failed
- DeliveryResult: tagged outcome with page ID, retry-after hint, or reason

Dependencies: pydantic, enum, exceptions
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from turn_relay.exceptions import DeliveryFailed, RateLimited


class DeliveryStatus(str, Enum):
    """Classification of a delivery attempt."""

    DELIVERED = "delivered"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"


class DeliveryResult(BaseModel):
    """
    Result of one delivery attempt.

    Exactly one of page_id (delivered), retry_after (rate limited, optional)
    or error (failed) is meaningful for a given status.
    """

    status: DeliveryStatus
    page_id: Optional[str] = Field(default=None, description="Created Notion page ID")
    retry_after: Optional[str] = Field(
        default=None,
        description="Retry-After header value, advisory only"
    )
    error: Optional[str] = Field(default=None, description="Failure reason")

    @classmethod
    def delivered(cls, page_id: Optional[str]) -> "DeliveryResult":
        return cls(status=DeliveryStatus.DELIVERED, page_id=page_id)

    @classmethod
    def rate_limited(cls, retry_after: Optional[str] = None) -> "DeliveryResult":
        return cls(status=DeliveryStatus.RATE_LIMITED, retry_after=retry_after)

    @classmethod
    def failed(cls, error: str) -> "DeliveryResult":
        return cls(status=DeliveryStatus.FAILED, error=error)

    @property
    def is_delivered(self) -> bool:
        return self.status == DeliveryStatus.DELIVERED

    @property
    def is_rate_limited(self) -> bool:
        return self.status == DeliveryStatus.RATE_LIMITED

    @property
    def is_failed(self) -> bool:
        return self.status == DeliveryStatus.FAILED

    def raise_for_outcome(self) -> Optional[str]:
        """
        Convert the outcome into exception flow.

        Returns:
            The created page ID when delivered

        Raises:
            RateLimited: If Notion rate limited the attempt
            DeliveryFailed: If the attempt failed for any other reason
        """
        if self.is_rate_limited:
            raise RateLimited(self.retry_after)
        if self.is_failed:
            raise DeliveryFailed(self.error or "Delivery failed")
        return self.page_id
