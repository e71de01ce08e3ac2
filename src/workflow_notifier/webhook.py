"""Slack incoming-webhook delivery.

Posts one JSON message to the webhook URL. Incoming webhooks answer
200 with a plain "ok" body on success and a short error string
("invalid_payload", "no_text", "channel_not_found" ...) otherwise.

There is no retry: a failed delivery fails the workflow step, and the
Slack error string is surfaced as the failure reason.
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from workflow_notifier.logging_config import get_logger

logger = get_logger(__name__)


class DeliveryError(RuntimeError):
    """The webhook rejected the message."""


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class WebhookClientProtocol(Protocol):
    """Protocol for message transports."""

    async def send(self, payload: dict[str, Any]) -> None:
        """Deliver one message.

        Args:
            payload: JSON-serialisable Slack message
        """
        ...


# ---------------------------------------------------------------------------
# Slack Implementation
# ---------------------------------------------------------------------------


class SlackWebhookClient:
    """Posts messages to a Slack incoming webhook.

    Usage:
        client = SlackWebhookClient("https://hooks.slack.com/services/...")
        await client.send({"text": "hello"})
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._webhook_url = webhook_url
        self._timeout = timeout
        self._transport = transport

    async def send(self, payload: dict[str, Any]) -> None:
        """POST `payload` as JSON.

        Raises:
            DeliveryError: If Slack answers with a non-2xx status
            httpx.HTTPError: If the request itself fails
        """
        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            resp = await client.post(self._webhook_url, json=payload)

        if resp.is_error:
            raise DeliveryError(
                f"Slack webhook returned {resp.status_code}: {resp.text}"
            )
        logger.info("message_sent", status_code=resp.status_code)


# ---------------------------------------------------------------------------
# Mock Implementation
# ---------------------------------------------------------------------------


class MockWebhookClient:
    """Records payloads instead of posting them.

    Used by tests and by the CLI's --dry-run mode.
    """

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    async def send(self, payload: dict[str, Any]) -> None:
        self.sent.append(payload)
