"""
Module: queue_store.py
Description: Key/value store for the turn retry queue.

Provides put/get/delete/list-by-prefix operations with per-item TTL,
backed by a DynamoDB table with TTL enabled on the expires_at attribute.

Key Components:
- QueueStore: Abstract interface consumed by the retry queue manager
- DynamoDBQueueStore: boto3 implementation
- TTL handling: expired items are hidden on read because DynamoDB
  removes them lazily

Table schema:
    queue_key (S, hash key), value (S, JSON), expires_at (N, epoch seconds)

Dependencies: boto3, botocore, time, typing
"""

import time
from abc import ABC, abstractmethod
from typing import List, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from turn_relay.exceptions import QueueStorageUnavailable
from turn_relay.utils.logger import get_logger

logger = get_logger(__name__)


class QueueStore(ABC):
    """
    Durable key/value store with TTL expiry.

    Single-key operations are atomic; nothing else is.
    Implementations raise QueueStorageUnavailable when the backend fails.
    """

    @abstractmethod
    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store value under key, expiring ttl_seconds from now."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Return the value under key, or None if absent or expired."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove key. Deleting an absent key is not an error."""

    @abstractmethod
    async def list_keys(self, prefix: str) -> List[str]:
        """Return all live keys starting with prefix, in no particular order."""


def _error_fields(e: Exception) -> dict:
    if isinstance(e, ClientError):
        return {
            'error_code': e.response['Error']['Code'],
            'error_message': e.response['Error']['Message']
        }
    return {'error': str(e)}


class DynamoDBQueueStore(QueueStore):
    """
    DynamoDB-backed retry queue store.

    Attributes:
        table_name: Name of the DynamoDB queue table
        dynamodb: boto3 DynamoDB resource
        table: boto3 DynamoDB table resource

    Example:
        >>> store = DynamoDBQueueStore(table_name="turn-relay-queue")
        >>> await store.put("queue:1700000000000:3f9a1c2be", "{...}", 86400)
        >>> await store.list_keys("queue:")
        ['queue:1700000000000:3f9a1c2be']
    """

    def __init__(self, table_name: str, region_name: Optional[str] = None):
        """
        Initialize DynamoDB queue store.

        Args:
            table_name: Name of the DynamoDB queue table
            region_name: AWS region of the table

        Raises:
            ValueError: If table_name is empty or invalid
        """
        if not table_name or not isinstance(table_name, str):
            raise ValueError("table_name must be a non-empty string")

        self.table_name = table_name
        self.dynamodb = boto3.resource('dynamodb', region_name=region_name)
        self.table = self.dynamodb.Table(table_name)

        logger.info(
            "DynamoDB queue store initialized",
            table_name=table_name
        )

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """
        Store a queue item.

        Args:
            key: Queue key
            value: Serialized item
            ttl_seconds: Lifetime from now

        Raises:
            QueueStorageUnavailable: If DynamoDB operation fails
            ValueError: If parameters are invalid
        """
        if not key or not isinstance(key, str):
            raise ValueError("key must be a non-empty string")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        expires_at = int(time.time()) + ttl_seconds

        try:
            self.table.put_item(Item={
                'queue_key': key,
                'value': value,
                'expires_at': expires_at
            })

            logger.debug(
                "Queue item stored",
                queue_key=key,
                expires_at=expires_at,
                table_name=self.table_name
            )

        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to store queue item",
                queue_key=key,
                table_name=self.table_name,
                **_error_fields(e)
            )
            raise QueueStorageUnavailable(f"Failed to store queue item {key}") from e

    async def get(self, key: str) -> Optional[str]:
        """
        Retrieve a queue item.

        Args:
            key: Queue key

        Returns:
            Serialized item if present and not expired, None otherwise

        Raises:
            QueueStorageUnavailable: If DynamoDB operation fails
        """
        if not key or not isinstance(key, str):
            raise ValueError("key must be a non-empty string")

        try:
            response = self.table.get_item(Key={'queue_key': key})
        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to read queue item",
                queue_key=key,
                table_name=self.table_name,
                **_error_fields(e)
            )
            raise QueueStorageUnavailable(f"Failed to read queue item {key}") from e

        item = response.get('Item')
        if not item:
            return None

        # TTL deletion is lazy; an expired item may still be returned
        if int(item.get('expires_at', 0)) <= int(time.time()):
            logger.debug("Queue item expired", queue_key=key)
            return None

        return item['value']

    async def delete(self, key: str) -> None:
        """
        Delete a queue item.

        Raises:
            QueueStorageUnavailable: If DynamoDB operation fails
        """
        if not key or not isinstance(key, str):
            raise ValueError("key must be a non-empty string")

        try:
            self.table.delete_item(Key={'queue_key': key})

            logger.debug(
                "Queue item deleted",
                queue_key=key,
                table_name=self.table_name
            )

        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to delete queue item",
                queue_key=key,
                table_name=self.table_name,
                **_error_fields(e)
            )
            raise QueueStorageUnavailable(f"Failed to delete queue item {key}") from e

    async def list_keys(self, prefix: str) -> List[str]:
        """
        List live queue keys under a prefix.

        Scans the whole table following LastEvaluatedKey pagination.

        Args:
            prefix: Key prefix

        Returns:
            Keys of items that have not expired

        Raises:
            QueueStorageUnavailable: If DynamoDB operation fails
        """
        if not prefix or not isinstance(prefix, str):
            raise ValueError("prefix must be a non-empty string")

        kwargs = {
            'FilterExpression': (
                Attr('queue_key').begins_with(prefix)
                & Attr('expires_at').gt(int(time.time()))
            ),
            'ProjectionExpression': 'queue_key',
        }
        keys = []

        try:
            while True:
                response = self.table.scan(**kwargs)
                keys.extend(item['queue_key'] for item in response.get('Items', []))

                if 'LastEvaluatedKey' not in response:
                    break
                kwargs['ExclusiveStartKey'] = response['LastEvaluatedKey']

        except (ClientError, BotoCoreError) as e:
            logger.error(
                "Failed to list queue items",
                prefix=prefix,
                table_name=self.table_name,
                **_error_fields(e)
            )
            raise QueueStorageUnavailable("Failed to list queue items") from e

        logger.debug(
            "Queue keys listed",
            prefix=prefix,
            count=len(keys),
            table_name=self.table_name
        )

        return keys
