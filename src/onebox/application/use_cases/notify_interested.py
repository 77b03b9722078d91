"""Fan out notifications for leads classified as Interested."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from onebox.application.ports.notifier import ChatNotifier, DeliveryResult, WebhookNotifier
from onebox.domain.categories import EmailCategory
from onebox.domain.entities.email_document import EmailDocument


@dataclass
class NotificationResult:
    triggered: bool
    chat: Optional[DeliveryResult] = None
    webhook: Optional[DeliveryResult] = None


class NotifyInterestedUseCase:
    """
    Notify chat and webhook sinks about an Interested email.

    Both deliveries are best-effort and independent: a failure of one is
    logged and never prevents, retries or rolls back the other.
    """

    def __init__(
        self,
        chat: Optional[ChatNotifier] = None,
        webhook: Optional[WebhookNotifier] = None,
    ) -> None:
        self.chat = chat
        self.webhook = webhook

    @staticmethod
    def chat_text(doc: EmailDocument) -> str:
        return f"New {doc.label.value} email: {doc.subject} (id {doc.id})"

    @staticmethod
    def webhook_payload(doc: EmailDocument) -> dict[str, str]:
        return {"id": doc.id, "subject": doc.subject, "label": doc.label.value}

    def _deliver(self, sink: str, doc: EmailDocument, send: Callable[[], DeliveryResult]) -> DeliveryResult:
        try:
            result = send()
        except Exception as e:
            logger.error(f"{sink} notification failed for {doc.id}: {e}")
            return DeliveryResult(success=False, error=str(e))

        if result.success:
            logger.info(f"{sink} notified for {doc.id}")
        else:
            logger.error(f"{sink} notification failed for {doc.id}: {result.error}")
        return result

    def notify(self, doc: EmailDocument) -> NotificationResult:
        if doc.label is not EmailCategory.INTERESTED:
            return NotificationResult(triggered=False)

        result = NotificationResult(triggered=True)
        if self.chat is not None:
            result.chat = self._deliver("Chat", doc, lambda: self.chat.post(self.chat_text(doc)))
        if self.webhook is not None:
            result.webhook = self._deliver("Webhook", doc, lambda: self.webhook.post(self.webhook_payload(doc)))
        return result
