from __future__ import annotations

import pytest

from onebox.application.use_cases.notify_interested import NotifyInterestedUseCase
from onebox.application.use_cases.process_message import ProcessMessageUseCase
from onebox.infrastructure.email.accounts import AccountDescriptor
from tests.fakes import FakeChat, FakeClassifier, FakeStore, FakeWebhook


@pytest.fixture
def account() -> AccountDescriptor:
    return AccountDescriptor(host="imap.example.com", user="a@example.com", secret="pw")


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def chat() -> FakeChat:
    return FakeChat()


@pytest.fixture
def webhook() -> FakeWebhook:
    return FakeWebhook()


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier("Spam")


@pytest.fixture
def processor(store, classifier, chat, webhook) -> ProcessMessageUseCase:
    return ProcessMessageUseCase(
        store=store,
        classifier=classifier,
        notifier=NotifyInterestedUseCase(chat=chat, webhook=webhook),
    )


@pytest.fixture
def log_messages():
    """Capture loguru messages emitted during a test."""
    from loguru import logger

    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
