"""Outbound JSON webhook notifier."""

from __future__ import annotations

from typing import Any, Optional

import httpx

from onebox.application.ports.notifier import DeliveryResult, WebhookNotifier
from onebox.infrastructure.notifications.delivery import post_json


class HttpWebhookNotifier(WebhookNotifier):
    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        if not url:
            raise ValueError("INTERESTED_WEBHOOK_URL is required")
        self.url = url
        self.timeout = timeout
        self._client = client or httpx.Client()

    def post(self, payload: dict[str, Any]) -> DeliveryResult:
        return post_json(self._client, self.url, payload, self.timeout, "Webhook")

    def close(self) -> None:
        self._client.close()
