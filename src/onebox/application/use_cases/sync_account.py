"""Backfill and live-watch loop for a single mailbox."""

from __future__ import annotations

import random
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional

from loguru import logger

from onebox.application.ports.mailbox import MailboxConnectionError, MailboxError, MailboxSession
from onebox.application.retry import RetryBudget, backoff_delay
from onebox.application.supervisor import AccountHealth
from onebox.application.use_cases.process_message import ProcessMessageUseCase, ProcessOutcome
from onebox.domain.entities.message_ref import MessageRef
from onebox.infrastructure.email.accounts import AccountDescriptor


@dataclass
class SyncStats:
    processed: int = 0
    skipped: int = 0
    errors: int = 0


class AccountSyncDriver:
    """
    Synchronize one account.

    Flow:
    1. Connect and select the account folder
    2. Backfill every message from the last ``backfill_days`` days
    3. IDLE forever; on activity, process all unseen messages

    Messages are processed one at a time in the order the server yields
    them. A failure while processing a message is logged and the batch
    continues. Connection failures escape so the supervisor can restart
    the loop. Processed messages are not marked seen, so unseen mail is
    re-evaluated on each wake and dropped by the dedup check.
    """

    def __init__(
        self,
        account: AccountDescriptor,
        session_factory: Callable[[AccountDescriptor], MailboxSession],
        processor: ProcessMessageUseCase,
        *,
        backfill_days: int = 30,
        idle_timeout: float = 29 * 60,
        watch_max_retries: int = 5,
        watch_backoff_base: float = 1.0,
        watch_backoff_max: float = 60.0,
        health: Optional[AccountHealth] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        rng: Optional[random.Random] = None,
    ) -> None:
        self.account = account
        self.session_factory = session_factory
        self.processor = processor
        self.backfill_days = backfill_days
        self.idle_timeout = idle_timeout
        self.watch_max_retries = watch_max_retries
        self.watch_backoff_base = watch_backoff_base
        self.watch_backoff_max = watch_backoff_max
        self.health = health or AccountHealth(name=account.name or account.user)
        self.clock = clock
        self.rng = rng

    @property
    def _tag(self) -> str:
        return f"[{self.account.user}]"

    def run(self, stop_event: threading.Event) -> None:
        session = self.session_factory(self.account)
        try:
            session.connect_and_select(self.account.folder)
            self.health.mark_healthy()
            self.backfill(session)
            self.watch_forever(session, stop_event)
        finally:
            session.disconnect()

    def _process_one(self, message: MessageRef, stats: SyncStats) -> None:
        try:
            outcome = self.processor.process(message, self.account.user, self.account.folder)
        except MailboxConnectionError:
            raise
        except Exception as e:
            stats.errors += 1
            self.health.record_error(e)
            logger.error(f"{self._tag} Failed to process UID {message.uid}: {e}")
            return

        if outcome is ProcessOutcome.SKIPPED_DUPLICATE:
            stats.skipped += 1
            self.health.record_skipped()
        else:
            stats.processed += 1
            self.health.record_processed()

    def process_batch(self, messages: Iterable[MessageRef]) -> SyncStats:
        stats = SyncStats()
        for message in messages:
            self._process_one(message, stats)
        return stats

    def backfill(self, session: MailboxSession, now: Optional[datetime] = None) -> SyncStats:
        cutoff = (now or self.clock()) - timedelta(days=self.backfill_days)
        logger.info(f"{self._tag} Backfilling since {cutoff.isoformat()}")

        stats = self.process_batch(session.fetch_range(cutoff))
        logger.info(
            f"{self._tag} Backfill done: processed={stats.processed}, "
            f"skipped={stats.skipped}, errors={stats.errors}"
        )
        return stats

    def watch_once(self, session: MailboxSession) -> Optional[SyncStats]:
        """One IDLE cycle. Returns stats when unseen mail was processed."""
        active = session.watch(self.idle_timeout)
        self.health.mark_healthy()
        if not active:
            return None

        unseen = session.unseen_count()
        if unseen <= 0:
            return None

        logger.info(f"{self._tag} {unseen} unseen message(s)")
        return self.process_batch(session.fetch_unseen())

    def watch_forever(self, session: MailboxSession, stop_event: threading.Event) -> None:
        budget = RetryBudget(self.watch_max_retries)

        while not stop_event.is_set():
            try:
                self.watch_once(session)
            except MailboxConnectionError:
                raise
            except MailboxError as e:
                # Raises WatchRetryBudgetExceeded once the budget is spent
                attempt = budget.record_failure(e)
                delay = backoff_delay(attempt, self.watch_backoff_base, self.watch_backoff_max, self.rng)
                self.health.mark_degraded(str(e))
                logger.warning(f"{self._tag} Watch failed ({e}), retrying in {delay:.1f}s")
                stop_event.wait(delay)
            else:
                budget.reset()
