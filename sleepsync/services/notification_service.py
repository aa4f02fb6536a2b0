"""
Outbound chat notifications.

The chat transport lives outside this service. Sends are fire-and-forget:
delivery failures are logged and never raised into the sleep cycle.
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from sleepsync.core.logger import get_logger

logger = get_logger("notification_service")


class NotificationSink(ABC):

    @abstractmethod
    async def send(self, participant_id: str, text: str) -> None:
        """Deliver `text` to a participant."""

    async def close(self) -> None:
        return None


class LoggingNotificationSink(NotificationSink):
    """Writes outgoing messages to the log. Used when no transport is configured."""

    async def send(self, participant_id: str, text: str) -> None:
        logger.info(f"📨 To {participant_id}: {text!r}")


class WebhookNotificationSink(NotificationSink):
    """POSTs `{participant_id, text}` to the chat transport's send endpoint."""

    def __init__(self, url: str, client: Optional[httpx.AsyncClient] = None, timeout: float = 10.0):
        self.url = url
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, participant_id: str, text: str) -> None:
        try:
            response = await self.client.post(self.url, json={"participant_id": participant_id, "text": text})
            response.raise_for_status()
            logger.debug(f"Delivered message to {participant_id}")
        except httpx.HTTPError as e:
            logger.error(f"❌ Failed to deliver message to {participant_id}: {e}")

    async def close(self) -> None:
        await self.client.aclose()


def create_notification_sink(webhook_url: str = "") -> NotificationSink:
    if webhook_url:
        logger.info(f"Sending notifications through {webhook_url}")
        return WebhookNotificationSink(webhook_url)
    logger.warning("NOTIFY_WEBHOOK_URL not set; notifications are only logged")
    return LoggingNotificationSink()
