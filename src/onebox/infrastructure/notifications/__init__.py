"""Notification sinks."""

from __future__ import annotations

from typing import Optional

from loguru import logger

from onebox.infrastructure.notifications.slack import SlackNotifier
from onebox.infrastructure.notifications.webhook import HttpWebhookNotifier
from onebox.infrastructure.settings import Settings


def notifiers_from_settings(settings: Settings) -> tuple[Optional[SlackNotifier], Optional[HttpWebhookNotifier]]:
    """Build the configured sinks; an unset URL disables that sink."""
    timeout = settings.notification_timeout_seconds

    chat = None
    if settings.slack_webhook_url:
        chat = SlackNotifier(settings.slack_webhook_url, timeout=timeout)
    else:
        logger.info("Slack notifications disabled (SLACK_WEBHOOK_URL not set)")

    webhook = None
    if settings.interested_webhook_url:
        webhook = HttpWebhookNotifier(settings.interested_webhook_url, timeout=timeout)
    else:
        logger.info("Webhook notifications disabled (INTERESTED_WEBHOOK_URL not set)")

    return chat, webhook


__all__ = [
    "HttpWebhookNotifier",
    "SlackNotifier",
    "notifiers_from_settings",
]
