"""
Module: notion.py
Description: Single-attempt turn delivery to a Notion database.

Maps a TurnEvent onto Notion page properties, creates the page with one
HTTP POST and classifies the response as delivered, rate limited or
failed. Retry policy lives in delivery/retry.py, not here.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from turn_relay.exceptions import ConfigurationError
from turn_relay.models.delivery import DeliveryResult
from turn_relay.models.turn import TurnEvent
from turn_relay.utils.logger import get_logger

logger = get_logger(__name__)

NOTION_PAGES_URL = "https://api.notion.com/v1/pages"
NOTION_VERSION = "2022-06-28"


def _text(content: str) -> list:
    return [{'text': {'content': content}}]


def build_page_properties(
    turn: TurnEvent,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Map a turn onto the Notion database schema.

    The Timestamp property records delivery time, not the time the turn
    was resolved. A turn without a name gets the title 'Turn <epoch-millis>'.

    Args:
        turn: Turn to map
        now: Delivery time, defaults to current UTC time

    Returns:
        Notion page properties
    """
    now = now or datetime.now(timezone.utc)

    properties: Dict[str, Any] = {
        'Name': {
            'title': _text(turn.name or f"Turn {int(now.timestamp() * 1000)}")
        }
    }

    if turn.status:
        properties['Status'] = {'select': {'name': turn.status}}

    if turn.description:
        properties['Description'] = {'rich_text': _text(turn.description)}

    properties['Timestamp'] = {'date': {'start': now.isoformat()}}

    return properties


class NotionDeliveryClient:
    """
    HTTP client for creating turn pages in Notion.

    Holds no per-request state, so one instance may serve concurrent
    deliveries.
    """

    def __init__(
        self,
        api_key: Optional[str],
        database_id: Optional[str],
        api_url: str = NOTION_PAGES_URL,
        notion_version: str = NOTION_VERSION,
        timeout_seconds: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize Notion delivery client.

        Missing credentials are accepted here and reported by every
        delivery attempt instead.

        Args:
            api_key: Notion integration token
            database_id: Destination database ID
            api_url: Notion create-page endpoint
            notion_version: Notion-Version header value
            timeout_seconds: HTTP timeout in seconds
            transport: Optional httpx transport (used by tests)

        Raises:
            ValueError: If api_url is invalid
        """
        if not api_url.startswith(('http://', 'https://')):
            raise ValueError("api_url must be a valid HTTP/HTTPS URL")

        self.api_key = api_key
        self.database_id = database_id
        self.api_url = api_url
        self.notion_version = notion_version
        self.timeout = httpx.Timeout(timeout_seconds, connect=timeout_seconds)
        self.transport = transport

        logger.info(
            "Notion delivery client initialized",
            api_url=api_url,
            credentials_configured=bool(api_key and database_id),
            timeout_seconds=timeout_seconds
        )

    def _check_credentials(self) -> None:
        if not self.api_key or not self.database_id:
            raise ConfigurationError("Notion API credentials not configured")

    async def deliver_turn(self, turn: TurnEvent) -> DeliveryResult:
        """
        Create a Notion page for a turn.

        Args:
            turn: Turn to deliver

        Returns:
            DeliveryResult: delivered with the page ID, rate limited with the
            Retry-After hint, or failed with a reason
        """
        if not isinstance(turn, TurnEvent):
            raise ValueError("turn must be a TurnEvent instance")

        try:
            self._check_credentials()
        except ConfigurationError as e:
            logger.error("Turn delivery skipped", reason=str(e))
            return DeliveryResult.failed(str(e))

        body = {
            'parent': {'database_id': self.database_id},
            'properties': build_page_properties(turn)
        }
        headers = {
            'Authorization': f"Bearer {self.api_key}",
            'Content-Type': 'application/json',
            'Notion-Version': self.notion_version
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport
            ) as client:
                logger.debug("Attempting turn delivery", turn_name=turn.name)

                response = await client.post(self.api_url, json=body, headers=headers)

                if response.status_code == 429:
                    retry_after = response.headers.get('Retry-After')
                    logger.warning(
                        "Rate limited by Notion",
                        turn_name=turn.name,
                        retry_after=retry_after
                    )
                    return DeliveryResult.rate_limited(retry_after)

                if not response.is_success:
                    logger.warning(
                        "Notion API error",
                        turn_name=turn.name,
                        status_code=response.status_code,
                        response=response.text[:500]  # Truncate large responses
                    )
                    return DeliveryResult.failed(
                        f"Notion API error: {response.status_code}"
                    )

                page_id = response.json().get('id')

                logger.info(
                    "Turn delivered to Notion",
                    turn_name=turn.name,
                    page_id=page_id,
                    status_code=response.status_code
                )

                return DeliveryResult.delivered(page_id)

        except httpx.TimeoutException as e:
            logger.warning(
                "Turn delivery timeout",
                turn_name=turn.name,
                api_url=self.api_url
            )
            return DeliveryResult.failed(str(e) or "Notion request timed out")

        except httpx.NetworkError as e:
            logger.warning(
                "Turn delivery network error",
                turn_name=turn.name,
                error=str(e)
            )
            return DeliveryResult.failed(str(e) or "Network error")

        except Exception as e:
            logger.error(
                "Turn delivery failed",
                turn_name=turn.name,
                error=str(e),
                error_type=type(e).__name__
            )
            return DeliveryResult.failed(str(e) or type(e).__name__)
