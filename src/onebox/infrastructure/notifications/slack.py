"""Slack incoming-webhook notifier."""

from __future__ import annotations

from typing import Optional

import httpx
from loguru import logger

from onebox.application.ports.notifier import ChatNotifier, DeliveryResult
from onebox.infrastructure.notifications.delivery import post_json


class SlackNotifier(ChatNotifier):
    """Posts plain text messages to a Slack incoming webhook."""

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        if not webhook_url:
            raise ValueError("SLACK_WEBHOOK_URL is required")
        self.webhook_url = webhook_url
        self.timeout = timeout
        self._client = client or httpx.Client()

    def post(self, text: str) -> DeliveryResult:
        result = post_json(self._client, self.webhook_url, {"text": text}, self.timeout, "Slack")
        if result.success:
            logger.debug(f"Slack message sent: {text[:80]}")
        return result

    def close(self) -> None:
        self._client.close()
