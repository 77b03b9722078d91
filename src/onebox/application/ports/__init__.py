"""Contracts the pipeline requires from its external collaborators."""

from onebox.application.ports.classifier import EmailClassifier
from onebox.application.ports.email_store import EmailStore
from onebox.application.ports.mailbox import (
    MailboxConnectionError,
    MailboxError,
    MailboxSession,
    MailboxWatchError,
)
from onebox.application.ports.notifier import ChatNotifier, DeliveryResult, WebhookNotifier

__all__ = [
    "ChatNotifier",
    "DeliveryResult",
    "EmailClassifier",
    "EmailStore",
    "MailboxConnectionError",
    "MailboxError",
    "MailboxSession",
    "MailboxWatchError",
    "WebhookNotifier",
]
