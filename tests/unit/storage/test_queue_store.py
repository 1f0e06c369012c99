"""
Module: test_queue_store.py
Description: Unit tests for the DynamoDB retry queue store.

Runs against a moto-mocked DynamoDB table. Covers TTL bookkeeping,
lazy-expiry filtering, prefix listing, and error wrapping.
"""

import time
from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError

from turn_relay.exceptions import QueueStorageUnavailable
from turn_relay.storage.queue_store import DynamoDBQueueStore

from tests.helpers import QUEUE_TABLE_NAME


def client_error(operation: str) -> ClientError:
    return ClientError(
        error_response={'Error': {'Code': 'ProvisionedThroughputExceededException', 'Message': 'Test error'}},
        operation_name=operation
    )


class TestDynamoDBQueueStore:
    """Test cases for DynamoDBQueueStore operations."""

    def test_initialization(self, mock_queue_table):
        store = DynamoDBQueueStore(table_name=QUEUE_TABLE_NAME, region_name="us-east-1")

        assert store.table_name == QUEUE_TABLE_NAME
        assert hasattr(store, 'table')

    def test_initialization_invalid_table_name(self):
        with pytest.raises(ValueError, match="table_name must be a non-empty string"):
            DynamoDBQueueStore(table_name="")

        with pytest.raises(ValueError, match="table_name must be a non-empty string"):
            DynamoDBQueueStore(table_name=None)

    @pytest.mark.asyncio
    async def test_put_sets_ttl_attribute(self, dynamodb_store, mock_queue_table):
        before = int(time.time())

        await dynamodb_store.put("queue:1:abc", '{"retry_count": 0}', 86400)

        item = mock_queue_table.get_item(Key={'queue_key': 'queue:1:abc'})['Item']
        assert item['value'] == '{"retry_count": 0}'
        assert before + 86400 <= int(item['expires_at']) <= int(time.time()) + 86400

    @pytest.mark.asyncio
    async def test_put_refreshes_expiry(self, dynamodb_store, mock_queue_table):
        await dynamodb_store.put("queue:1:abc", "v1", 60)
        await dynamodb_store.put("queue:1:abc", "v2", 86400)

        item = mock_queue_table.get_item(Key={'queue_key': 'queue:1:abc'})['Item']
        assert item['value'] == "v2"
        assert int(item['expires_at']) > int(time.time()) + 3600

    @pytest.mark.asyncio
    async def test_put_invalid_arguments(self, dynamodb_store):
        with pytest.raises(ValueError, match="key must be a non-empty string"):
            await dynamodb_store.put("", "v", 60)

        with pytest.raises(ValueError, match="ttl_seconds must be positive"):
            await dynamodb_store.put("queue:1:abc", "v", 0)

    @pytest.mark.asyncio
    async def test_get_roundtrip(self, dynamodb_store):
        await dynamodb_store.put("queue:1:abc", "payload", 60)

        assert await dynamodb_store.get("queue:1:abc") == "payload"

    @pytest.mark.asyncio
    async def test_get_missing(self, dynamodb_store):
        assert await dynamodb_store.get("queue:0:missing") is None

    @pytest.mark.asyncio
    async def test_get_hides_expired_item(self, dynamodb_store, mock_queue_table):
        mock_queue_table.put_item(Item={
            'queue_key': 'queue:1:old',
            'value': 'stale',
            'expires_at': int(time.time()) - 10
        })

        assert await dynamodb_store.get("queue:1:old") is None

    @pytest.mark.asyncio
    async def test_delete(self, dynamodb_store, mock_queue_table):
        await dynamodb_store.put("queue:1:abc", "payload", 60)

        await dynamodb_store.delete("queue:1:abc")

        assert 'Item' not in mock_queue_table.get_item(Key={'queue_key': 'queue:1:abc'})

    @pytest.mark.asyncio
    async def test_delete_missing_is_not_an_error(self, dynamodb_store):
        await dynamodb_store.delete("queue:0:missing")

    @pytest.mark.asyncio
    async def test_list_keys_by_prefix(self, dynamodb_store, mock_queue_table):
        await dynamodb_store.put("queue:1:a", "a", 60)
        await dynamodb_store.put("queue:2:b", "b", 60)
        await dynamodb_store.put("other:3:c", "c", 60)
        mock_queue_table.put_item(Item={
            'queue_key': 'queue:0:expired',
            'value': 'x',
            'expires_at': int(time.time()) - 10
        })

        keys = await dynamodb_store.list_keys("queue:")

        assert sorted(keys) == ["queue:1:a", "queue:2:b"]

    @pytest.mark.asyncio
    async def test_list_keys_follows_pagination(self, dynamodb_store):
        pages = [
            {'Items': [{'queue_key': 'queue:1:a'}], 'LastEvaluatedKey': {'queue_key': 'queue:1:a'}},
            {'Items': [{'queue_key': 'queue:2:b'}]},
        ]

        with patch.object(dynamodb_store.table, 'scan', side_effect=pages) as mock_scan:
            keys = await dynamodb_store.list_keys("queue:")

        assert keys == ["queue:1:a", "queue:2:b"]
        assert mock_scan.call_count == 2
        assert mock_scan.call_args_list[1].kwargs['ExclusiveStartKey'] == {'queue_key': 'queue:1:a'}

    @pytest.mark.asyncio
    async def test_list_keys_empty(self, dynamodb_store):
        assert await dynamodb_store.list_keys("queue:") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation,method,args", [
        ("PutItem", "put_item", ("put", "queue:1:a", "v", 60)),
        ("GetItem", "get_item", ("get", "queue:1:a")),
        ("DeleteItem", "delete_item", ("delete", "queue:1:a")),
        ("Scan", "scan", ("list_keys", "queue:")),
    ])
    async def test_client_errors_are_wrapped(self, dynamodb_store, operation, method, args):
        name, *call_args = args

        with patch.object(dynamodb_store.table, method, side_effect=client_error(operation)):
            with pytest.raises(QueueStorageUnavailable) as exc_info:
                await getattr(dynamodb_store, name)(*call_args)

        assert isinstance(exc_info.value.__cause__, ClientError)
