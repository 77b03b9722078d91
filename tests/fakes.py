"""In-memory stand-ins for the pipeline's external collaborators."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Any, Iterator, Optional, Union

from onebox.application.ports.mailbox import MailboxConnectionError
from onebox.application.ports.notifier import DeliveryResult
from onebox.domain.entities.email_document import EmailDocument
from onebox.domain.entities.message_ref import EmailAddress, Envelope, MessageRef


def make_raw(plain: Optional[str] = "Hello there", html: Optional[str] = None, subject: str = "Hi") -> bytes:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = "Lead <lead@example.com>"
    msg["To"] = "sales@example.com"
    if plain is not None:
        msg.set_content(plain)
        if html is not None:
            msg.add_alternative(html, subtype="html")
    elif html is not None:
        msg.set_content(html, subtype="html")
    return bytes(msg)


def make_message(
    uid: int,
    subject: Optional[str] = "Hello",
    raw: Optional[bytes] = None,
    date: Optional[datetime] = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc),
) -> MessageRef:
    source = make_raw() if raw is None else raw
    envelope = Envelope(
        subject=subject,
        from_=[EmailAddress("lead@example.com", "Lead")],
        to=[EmailAddress("sales@example.com")],
        date=date,
    )
    ref = MessageRef(uid=uid, envelope=envelope, load_source=lambda: source)
    return ref


class FakeStore:
    def __init__(self) -> None:
        self.docs: dict[str, EmailDocument] = {}
        self.exists_calls: list[str] = []
        self.upserts: list[EmailDocument] = []
        self.fail_upsert: Optional[Exception] = None

    def exists(self, doc_id: str) -> bool:
        self.exists_calls.append(doc_id)
        return doc_id in self.docs

    def upsert(self, document: EmailDocument) -> None:
        if self.fail_upsert is not None:
            raise self.fail_upsert
        self.upserts.append(document)
        self.docs[document.id] = document


class FakeClassifier:
    def __init__(self, answer: Union[str, Exception] = "Spam") -> None:
        self.answer = answer
        self.calls: list[str] = []

    def classify(self, text: str) -> str:
        self.calls.append(text)
        if isinstance(self.answer, Exception):
            raise self.answer
        return self.answer


class FakeChat:
    def __init__(self, fail: Optional[Exception] = None) -> None:
        self.fail = fail
        self.posts: list[str] = []

    def post(self, text: str) -> DeliveryResult:
        self.posts.append(text)
        if self.fail is not None:
            raise self.fail
        return DeliveryResult(success=True, status_code=200)


class FakeWebhook:
    def __init__(self, result: Optional[DeliveryResult] = None) -> None:
        self.result = result or DeliveryResult(success=True, status_code=200)
        self.payloads: list[dict[str, Any]] = []

    def post(self, payload: dict[str, Any]) -> DeliveryResult:
        self.payloads.append(payload)
        return self.result


class FakeSession:
    """
    Scripted mailbox session.

    ``watch_script`` items are consumed one per ``watch()`` call: a bool is
    returned, an exception is raised. When the script runs out the
    session sets ``stop_event`` so loops under test terminate.
    """

    def __init__(
        self,
        range_messages: Optional[list[MessageRef]] = None,
        unseen_batches: Optional[list[list[MessageRef]]] = None,
        watch_script: Optional[list[Union[bool, Exception]]] = None,
        stop_event: Optional[threading.Event] = None,
        connect_error: Optional[Exception] = None,
    ) -> None:
        self.range_messages = range_messages or []
        self.unseen_batches = list(unseen_batches or [])
        self.watch_script = list(watch_script or [])
        self.stop_event = stop_event or threading.Event()
        self.connect_error = connect_error
        self.selected: Optional[str] = None
        self.since: Optional[datetime] = None
        self.disconnected = False
        self.calls: list[str] = []

    def connect_and_select(self, folder: str) -> None:
        self.calls.append("connect")
        if self.connect_error is not None:
            raise self.connect_error
        self.selected = folder

    def fetch_range(self, since: datetime) -> Iterator[MessageRef]:
        self.calls.append("fetch_range")
        self.since = since
        return iter(self.range_messages)

    def fetch_unseen(self) -> Iterator[MessageRef]:
        self.calls.append("fetch_unseen")
        return iter(self.unseen_batches[0] if self.unseen_batches else [])

    def unseen_count(self) -> int:
        self.calls.append("unseen_count")
        return len(self.unseen_batches[0]) if self.unseen_batches else 0

    def watch(self, timeout: Optional[float] = None) -> bool:
        self.calls.append("watch")
        if not self.watch_script:
            self.stop_event.set()
            return False
        step = self.watch_script.pop(0)
        if not self.watch_script:
            self.stop_event.set()
        if isinstance(step, Exception):
            raise step
        return step

    def disconnect(self) -> None:
        self.disconnected = True


class BrokenSession(FakeSession):
    def __init__(self) -> None:
        super().__init__(connect_error=MailboxConnectionError("connection refused"))
