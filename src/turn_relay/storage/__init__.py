"""
Module: storage
Description: Package initialization for the retry queue persistence layer.

This package contains the key/value store behind the retry queue:
- queue_store: QueueStore interface and its DynamoDB implementation

All storage implementations follow async interfaces for consistency.
"""

from .queue_store import DynamoDBQueueStore, QueueStore

__all__ = ["QueueStore", "DynamoDBQueueStore"]
