from __future__ import annotations

from datetime import datetime
from typing import Iterator, Protocol

from onebox.domain.entities.message_ref import MessageRef


class MailboxError(Exception):
    """Base error raised by mailbox sessions."""


class MailboxConnectionError(MailboxError, ConnectionError):
    """Network or authentication failure; the session is no longer usable."""


class MailboxWatchError(MailboxError):
    """Transient failure while waiting for mailbox activity."""


class MailboxSession(Protocol):
    def connect_and_select(self, folder: str) -> None: ...

    def fetch_range(self, since: datetime) -> Iterator[MessageRef]: ...

    def fetch_unseen(self) -> Iterator[MessageRef]: ...

    def watch(self, timeout: float | None = None) -> bool: ...

    def unseen_count(self) -> int: ...

    def disconnect(self) -> None: ...
