"""One-shot backfill of a single configured mailbox (no IDLE loop)."""

from __future__ import annotations

import argparse

from loguru import logger

from onebox.application.use_cases.notify_interested import NotifyInterestedUseCase
from onebox.application.use_cases.sync_account import AccountSyncDriver
from onebox.cli.worker import build_processor, configure_logging, session_factory
from onebox.infrastructure.email.accounts import AccountConfigError, AccountRegistry
from onebox.infrastructure.settings import get_settings


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Backfill one IMAP mailbox into the email store")
    parser.add_argument("--account", default=None, help="Account name or user (default: first configured)")
    parser.add_argument("--days", type=int, default=None, help="Days to look back (default: BACKFILL_DAYS)")
    parser.add_argument("--no-notify", action="store_true", help="Store and label only, skip notifications")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    try:
        registry = AccountRegistry.from_settings(settings)
    except AccountConfigError as e:
        logger.error(f"Invalid mailbox configuration: {e}")
        return 1

    if not len(registry):
        logger.error("No mailboxes configured! Set IMAP_ACCOUNTS or IMAP_MAILBOXES")
        return 1

    try:
        account = registry.get(args.account) if args.account else registry.list()[0]
    except KeyError:
        logger.error(f"Unknown account: {args.account}")
        return 1

    processor = build_processor(settings)
    if args.no_notify:
        processor.notifier = NotifyInterestedUseCase()

    driver = AccountSyncDriver(
        account,
        session_factory(settings),
        processor,
        backfill_days=settings.backfill_days if args.days is None else args.days,
    )

    session = driver.session_factory(account)
    try:
        session.connect_and_select(account.folder)
        stats = driver.backfill(session)
    finally:
        session.disconnect()

    print(
        f"Backfilled {account.user}/{account.folder}: processed={stats.processed}, "
        f"skipped={stats.skipped}, errors={stats.errors}"
    )
    return 0 if stats.errors == 0 else 2


if __name__ == "__main__":
    raise SystemExit(main())
