"""Email sync worker - one supervised IDLE loop per configured mailbox."""

from __future__ import annotations

import signal
import sys
import threading
from typing import Callable

from loguru import logger

from onebox.application.supervisor import AccountHealth, AccountSupervisor, RestartPolicy
from onebox.application.use_cases.notify_interested import NotifyInterestedUseCase
from onebox.application.use_cases.process_message import ProcessMessageUseCase
from onebox.application.use_cases.sync_account import AccountSyncDriver
from onebox.infrastructure import get_milvus_client
from onebox.infrastructure.classifier import LLMEmailClassifier
from onebox.infrastructure.email.accounts import AccountConfigError, AccountDescriptor, AccountRegistry
from onebox.infrastructure.email.providers.imap import ImapMailboxSession
from onebox.infrastructure.notifications import notifiers_from_settings
from onebox.infrastructure.settings import Settings, get_settings
from onebox.infrastructure.stores import MilvusEmailStore

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{thread.name}</cyan> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper())


def build_processor(settings: Settings) -> ProcessMessageUseCase:
    """Wire the shared store, classifier and notification sinks."""
    milvus = get_milvus_client()
    milvus.connect()
    health = milvus.health_check()
    if health["status"] != "healthy":
        raise RuntimeError(f"Milvus unavailable at {health['uri']}: {health.get('error')}")
    store = MilvusEmailStore(milvus, collection_name=settings.milvus_collection_name)

    chat, webhook = notifiers_from_settings(settings)
    return ProcessMessageUseCase(
        store=store,
        classifier=LLMEmailClassifier(settings=settings),
        notifier=NotifyInterestedUseCase(chat=chat, webhook=webhook),
    )


def session_factory(settings: Settings) -> Callable[[AccountDescriptor], ImapMailboxSession]:
    def factory(account: AccountDescriptor) -> ImapMailboxSession:
        return ImapMailboxSession(
            account,
            timeout=settings.imap_timeout_seconds,
            batch_size=settings.fetch_batch_size,
        )

    return factory


def build_driver(
    account: AccountDescriptor,
    processor: ProcessMessageUseCase,
    settings: Settings,
    health: AccountHealth,
) -> AccountSyncDriver:
    return AccountSyncDriver(
        account,
        session_factory(settings),
        processor,
        backfill_days=settings.backfill_days,
        idle_timeout=settings.idle_timeout_seconds,
        watch_max_retries=settings.watch_max_retries,
        watch_backoff_base=settings.watch_backoff_base_seconds,
        watch_backoff_max=settings.watch_backoff_max_seconds,
        health=health,
    )


class EmailWorker:
    """
    Multi-mailbox email sync worker.

    Starts one supervised thread per account. Accounts share the
    processor's stateless collaborators (store, classifier, sinks) but
    no mutable state; each thread owns its own IMAP connection.
    """

    def __init__(
        self,
        accounts: list[AccountDescriptor],
        processor: ProcessMessageUseCase,
        settings: Settings,
    ):
        self.accounts = accounts
        self.processor = processor
        self.settings = settings
        self.stop_event = threading.Event()
        self.supervisors: list[AccountSupervisor] = []

    def _make_supervisor(self, account: AccountDescriptor) -> AccountSupervisor:
        return AccountSupervisor(
            name=account.name or account.user,
            loop_factory=lambda health: build_driver(account, self.processor, self.settings, health),
            policy=RestartPolicy.from_settings(self.settings),
            stop_event=self.stop_event,
        )

    def start(self) -> None:
        for account in self.accounts:
            supervisor = self._make_supervisor(account)
            supervisor.start()
            self.supervisors.append(supervisor)
            logger.info(f"Started sync thread for {supervisor.name}")

    def log_stats(self) -> None:
        """Log current per-account health."""
        for supervisor in self.supervisors:
            s = supervisor.health.snapshot()
            logger.info(
                f"Account {s['name']}: status={s['status']}, processed={s['processed']}, "
                f"skipped={s['skipped']}, errors={s['errors']}, restarts={s['restarts']}"
                + (f", last_error={s['last_error']}" if s["last_error"] else "")
            )

    def _handle_shutdown(self, signum, frame) -> None:
        """Handle graceful shutdown."""
        logger.info(f"Received signal {signum}, shutting down...")
        self.stop_event.set()

    def run(self) -> int:
        """Run until a shutdown signal arrives or every account has stopped."""
        signal.signal(signal.SIGTERM, self._handle_shutdown)
        signal.signal(signal.SIGINT, self._handle_shutdown)

        logger.info(f"Email worker starting with {len(self.accounts)} mailbox(es)")
        self.start()

        while not self.stop_event.is_set():
            self.stop_event.wait(self.settings.stats_interval_seconds)
            self.log_stats()
            if not any(s.thread and s.thread.is_alive() for s in self.supervisors):
                logger.error("All account loops have stopped")
                break

        # Threads blocked in IDLE are daemonic and end with the process
        for supervisor in self.supervisors:
            if supervisor.thread:
                supervisor.thread.join(timeout=5)

        logger.info("Worker shutdown complete")
        self.log_stats()
        return 0


def main() -> int:
    """Entry point for the email worker."""
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("=" * 60)
    logger.info(f"{settings.app_name} v{settings.app_version}")
    logger.info("=" * 60)

    try:
        registry = AccountRegistry.from_settings(settings)
    except AccountConfigError as e:
        logger.error(f"Invalid mailbox configuration: {e}")
        return 1

    if not len(registry):
        logger.error("No mailboxes configured! Set IMAP_ACCOUNTS or IMAP_MAILBOXES")
        return 1

    try:
        processor = build_processor(settings)
    except Exception as e:
        logger.error(f"Failed to initialize infrastructure: {e}")
        return 1

    worker = EmailWorker(list(registry.list()), processor, settings)
    try:
        return worker.run()
    finally:
        get_milvus_client().disconnect()


if __name__ == "__main__":
    raise SystemExit(main())
