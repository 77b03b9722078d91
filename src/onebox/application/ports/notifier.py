from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass
class DeliveryResult:
    """Result of a single notification delivery."""

    success: bool
    status_code: int | None = None
    error: str | None = None


class ChatNotifier(Protocol):
    def post(self, text: str) -> DeliveryResult: ...


class WebhookNotifier(Protocol):
    def post(self, payload: dict[str, Any]) -> DeliveryResult: ...
