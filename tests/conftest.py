"""
Module: conftest.py
Description: Shared pytest fixtures for Turn Relay tests.

Provides reusable fixtures for the retry queue store, the Notion API,
and sample turn data. Uses moto for DynamoDB mocking and
httpx.MockTransport for the Notion API so tests never touch the network.
"""

from typing import Callable

import boto3
import httpx
import pytest
from moto import mock_aws

from turn_relay.config.settings import Settings
from turn_relay.delivery.notion import NotionDeliveryClient
from turn_relay.models.turn import TurnEvent
from turn_relay.storage.queue_store import DynamoDBQueueStore

from tests.helpers import NOTION_URL, QUEUE_TABLE_NAME, InMemoryQueueStore, NotionStub


@pytest.fixture
def test_settings():
    """Settings that ignore the environment's .env file."""
    return Settings(
        _env_file=None,
        notion_api_key="secret_test",
        notion_database_id="db-test",
        notion_api_url=NOTION_URL,
        queue_table_name=QUEUE_TABLE_NAME,
        log_level="DEBUG"
    )


@pytest.fixture
def sample_turn_data():
    """Typical inbound turn payload."""
    return {
        "name": "Turn 12",
        "status": "Resolved",
        "description": "Player 2 captured the northern bridge"
    }


@pytest.fixture
def sample_turn(sample_turn_data):
    return TurnEvent(**sample_turn_data)


@pytest.fixture
def memory_store():
    return InMemoryQueueStore()


@pytest.fixture
def notion_client_factory() -> Callable[..., NotionDeliveryClient]:
    """
    Build a NotionDeliveryClient wired to a NotionStub.

    Usage:
        client = notion_client_factory(stub)
        client = notion_client_factory(stub, api_key=None)
    """
    def factory(stub: NotionStub, **overrides) -> NotionDeliveryClient:
        kwargs = {
            "api_key": "secret_test",
            "database_id": "db-test",
            "api_url": NOTION_URL,
            "transport": httpx.MockTransport(stub),
        }
        kwargs.update(overrides)
        return NotionDeliveryClient(**kwargs)

    return factory


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake AWS credentials so boto3 never picks up real ones."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def mock_queue_table(aws_credentials):
    """
    Create mock DynamoDB table for the retry queue.

    Uses moto to mock AWS DynamoDB and creates a table with the same
    schema as production.
    """
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name="us-east-1")

        table = dynamodb.create_table(
            TableName=QUEUE_TABLE_NAME,
            KeySchema=[
                {
                    "AttributeName": "queue_key",
                    "KeyType": "HASH"
                }
            ],
            AttributeDefinitions=[
                {
                    "AttributeName": "queue_key",
                    "AttributeType": "S"
                }
            ],
            BillingMode="PAY_PER_REQUEST"
        )

        yield table


@pytest.fixture
def dynamodb_store(mock_queue_table):
    """DynamoDBQueueStore bound to the mocked table."""
    return DynamoDBQueueStore(table_name=QUEUE_TABLE_NAME, region_name="us-east-1")
