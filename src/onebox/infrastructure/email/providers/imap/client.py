from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, Optional

from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientAbortError, IMAPClientError, LoginError
from loguru import logger

from onebox.application.ports.mailbox import (
    MailboxConnectionError,
    MailboxError,
    MailboxSession,
    MailboxWatchError,
)
from onebox.domain.entities.message_ref import MessageRef
from onebox.infrastructure.email.accounts import AccountDescriptor
from onebox.infrastructure.email.providers.imap.mapper import to_envelope

ClientFactory = Callable[[AccountDescriptor, Optional[float]], IMAPClient]


def _default_client_factory(account: AccountDescriptor, timeout: Optional[float]) -> IMAPClient:
    return IMAPClient(account.host, port=account.port, ssl=account.tls, timeout=timeout)


class ImapMailboxSession(MailboxSession):
    """One persistent IMAP connection to one account's folder."""

    def __init__(
        self,
        account: AccountDescriptor,
        timeout: Optional[float] = 60.0,
        batch_size: int = 50,
        client_factory: ClientFactory = _default_client_factory,
    ) -> None:
        self.account = account
        self.timeout = timeout
        self.batch_size = batch_size
        self._client_factory = client_factory
        self._client: Optional[IMAPClient] = None
        self._folder: Optional[str] = None

    @property
    def _tag(self) -> str:
        return f"[{self.account.user}]"

    @contextmanager
    def _guard(self, op: str, transient: type[MailboxError] = MailboxError) -> Iterator[None]:
        """Translate imapclient/socket failures into mailbox errors."""
        try:
            yield
        except MailboxError:
            raise
        except (IMAPClientAbortError, LoginError, OSError) as e:
            logger.error(f"{self._tag} IMAP error during {op}: {e}")
            self._drop()
            raise MailboxConnectionError(f"{op} failed for {self.account.user}: {e}") from e
        except IMAPClientError as e:
            raise transient(f"{op} failed for {self.account.user}: {e}") from e

    def _drop(self) -> None:
        self._client = None

    @property
    def client(self) -> IMAPClient:
        if self._client is None:
            raise MailboxConnectionError(f"Not connected: {self.account.user}")
        return self._client

    def connect_and_select(self, folder: str) -> None:
        with self._guard("connect"):
            client = self._client_factory(self.account, self.timeout)
            # Keep timezone-aware envelope dates
            client.normalise_times = False
            client.login(self.account.user, self.account.secret.get_secret_value())
            self._client = client
        logger.info(f"IMAP connected: {self.account.user}")

        with self._guard("select", transient=MailboxConnectionError):
            self.client.select_folder(folder, readonly=False)
        self._folder = folder
        logger.info(f"{self._tag} Selected folder {folder}")

    def disconnect(self) -> None:
        if self._client is None:
            return
        try:
            self._client.logout()
        except (IMAPClientError, OSError) as e:
            logger.debug(f"{self._tag} Logout failed: {e}")
        self._client = None

    def _fetch_source(self, uid: int) -> bytes:
        with self._guard(f"fetch body {uid}"):
            data = self.client.fetch([uid], ["BODY.PEEK[]"])
        entry = data.get(uid) or {}
        return entry.get(b"BODY[]") or b""

    def _iter_refs(self, uids: list[int]) -> Iterator[MessageRef]:
        for start in range(0, len(uids), self.batch_size):
            chunk = uids[start:start + self.batch_size]
            with self._guard("fetch envelopes"):
                data = self.client.fetch(chunk, ["ENVELOPE"])
            for uid in chunk:
                entry = data.get(uid)
                if entry is None:
                    # Expunged between SEARCH and FETCH
                    continue
                yield MessageRef(
                    uid=uid,
                    envelope=to_envelope(entry.get(b"ENVELOPE")),
                    load_source=lambda uid=uid: self._fetch_source(uid),
                )

    def fetch_range(self, since: datetime) -> Iterator[MessageRef]:
        """Messages dated on or after ``since`` (IMAP SINCE has day granularity)."""
        with self._guard("search since"):
            uids = list(self.client.search(["SINCE", since.date()]))
        logger.info(f"{self._tag} Found {len(uids)} messages since {since.date().isoformat()}")
        return self._iter_refs(uids)

    def fetch_unseen(self) -> Iterator[MessageRef]:
        with self._guard("search unseen"):
            uids = list(self.client.search(["UNSEEN"]))
        logger.debug(f"{self._tag} Found {len(uids)} unseen messages")
        return self._iter_refs(uids)

    def unseen_count(self) -> int:
        folder = self._folder or self.account.folder
        with self._guard("status"):
            status = self.client.folder_status(folder, ["UNSEEN"])
        return int(status.get(b"UNSEEN", 0) or 0)

    def watch(self, timeout: Optional[float] = None) -> bool:
        """IDLE until the server reports activity or ``timeout`` elapses."""
        client = self.client
        with self._guard("idle", transient=MailboxWatchError):
            client.idle()
            try:
                responses = client.idle_check(timeout=timeout)
            finally:
                client.idle_done()
        if responses:
            logger.debug(f"{self._tag} IDLE activity: {responses}")
        return bool(responses)
