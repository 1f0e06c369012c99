"""
Module: helpers.py
Description: Test doubles for the retry queue store and the Notion API.
"""

import json
from typing import Dict, List, Optional

import httpx

from turn_relay.exceptions import QueueStorageUnavailable
from turn_relay.storage.queue_store import QueueStore

QUEUE_TABLE_NAME = "test-turn-queue"
NOTION_URL = "https://api.notion.test/v1/pages"


class InMemoryQueueStore(QueueStore):
    """Dict-backed QueueStore that records TTLs and can be told to fail."""

    def __init__(self):
        self.items: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.fail_get_for: set = set()
        self.fail_list = False
        self.fail_put = False

    async def put(self, key: str, value: str, ttl_seconds: int) -> None:
        if self.fail_put:
            raise QueueStorageUnavailable("put failed")
        self.items[key] = value
        self.ttls[key] = ttl_seconds

    async def get(self, key: str) -> Optional[str]:
        if key in self.fail_get_for:
            raise QueueStorageUnavailable("get failed")
        return self.items.get(key)

    async def delete(self, key: str) -> None:
        self.items.pop(key, None)
        self.ttls.pop(key, None)

    async def list_keys(self, prefix: str) -> List[str]:
        if self.fail_list:
            raise QueueStorageUnavailable("list failed")
        return [key for key in self.items if key.startswith(prefix)]

    def load(self, key: str) -> dict:
        return json.loads(self.items[key])


class NotionStub:
    """
    Scripted Notion API for httpx.MockTransport.

    Responses are consumed in order; the last one repeats once the
    script runs out. Every request is recorded.
    """

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses) or [ok_response()]
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        template = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        # Fresh copy so a repeated response can be read again
        return httpx.Response(
            template.status_code,
            headers=template.headers,
            content=template.content
        )

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


def ok_response(page_id: str = "page-123") -> httpx.Response:
    return httpx.Response(200, json={"object": "page", "id": page_id})


def rate_limited_response(retry_after: Optional[str] = "1") -> httpx.Response:
    headers = {"Retry-After": retry_after} if retry_after else {}
    return httpx.Response(429, json={"code": "rate_limited"}, headers=headers)


def server_error_response(status_code: int = 500) -> httpx.Response:
    return httpx.Response(status_code, json={"code": "internal_server_error"})


