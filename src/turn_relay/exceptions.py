"""
Module: exceptions.py
Description: Error taxonomy for turn delivery and the retry queue.

The delivery client reports outcomes as DeliveryResult values; these
exceptions are raised where control flow is the better fit (inbound
payload parsing, queue storage, and DeliveryResult.raise_for_outcome).
"""

from typing import Optional


class TurnRelayError(Exception):
    """Base class for Turn Relay errors."""


class ConfigurationError(TurnRelayError):
    """Notion credentials are missing. Not retried on the inbound path."""


class DeliveryError(TurnRelayError):
    """Base class for outbound delivery errors."""


class RateLimited(DeliveryError):
    """Notion answered 429. Transient; queued and retried."""

    def __init__(self, retry_after: Optional[str] = None):
        self.retry_after = retry_after
        message = "Rate limited by Notion"
        if retry_after:
            message = f"{message} (retry after {retry_after})"
        super().__init__(message)


class DeliveryFailed(DeliveryError):
    """Any other delivery failure: non-2xx response or transport error."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class MalformedInboundPayload(TurnRelayError):
    """Inbound body is not a JSON object of the expected shape. Never queued."""


class QueueStorageUnavailable(TurnRelayError):
    """Retry queue store is not configured or failed an operation."""
