from __future__ import annotations

from onebox.application.ports.notifier import DeliveryResult
from onebox.application.use_cases.notify_interested import NotifyInterestedUseCase
from onebox.domain.categories import EmailCategory
from onebox.domain.entities.email_document import EmailDocument
from tests.fakes import FakeChat, FakeWebhook


def _doc(label: EmailCategory) -> EmailDocument:
    return EmailDocument(
        id="abc",
        account="a@example.com",
        folder="INBOX",
        subject="Demo?",
        from_="lead@example.com",
        to="sales@example.com",
        date="2026-10-01T12:00:00+00:00",
        text="Can we do a demo?",
        label=label,
    )


def test_only_interested_triggers_fan_out() -> None:
    chat, webhook = FakeChat(), FakeWebhook()
    notifier = NotifyInterestedUseCase(chat, webhook)

    for label in EmailCategory:
        if label is not EmailCategory.INTERESTED:
            assert notifier.notify(_doc(label)).triggered is False

    assert chat.posts == []
    assert webhook.payloads == []


def test_chat_failure_does_not_block_webhook() -> None:
    chat, webhook = FakeChat(fail=RuntimeError("slack down")), FakeWebhook()
    notifier = NotifyInterestedUseCase(chat, webhook)

    result = notifier.notify(_doc(EmailCategory.INTERESTED))

    assert result.triggered
    assert result.chat.success is False
    assert "slack down" in result.chat.error
    assert result.webhook.success is True
    assert webhook.payloads == [{"id": "abc", "subject": "Demo?", "label": "Interested"}]


def test_webhook_failure_does_not_affect_chat() -> None:
    chat = FakeChat()
    webhook = FakeWebhook(DeliveryResult(success=False, status_code=500, error="HTTP 500"))
    notifier = NotifyInterestedUseCase(chat, webhook)

    result = notifier.notify(_doc(EmailCategory.INTERESTED))

    assert chat.posts == ["New Interested email: Demo? (id abc)"]
    assert result.chat.success is True
    assert result.webhook.success is False


def test_disabled_sinks_are_skipped() -> None:
    result = NotifyInterestedUseCase().notify(_doc(EmailCategory.INTERESTED))

    assert result.triggered
    assert result.chat is None
    assert result.webhook is None


def test_chat_and_webhook_carry_id_subject_and_label() -> None:
    chat, webhook = FakeChat(), FakeWebhook()

    NotifyInterestedUseCase(chat, webhook).notify(_doc(EmailCategory.INTERESTED))

    (post,) = chat.posts
    assert "abc" in post
    assert "Demo?" in post
    assert "Interested" in post
    assert webhook.payloads == [{"id": "abc", "subject": "Demo?", "label": "Interested"}]
