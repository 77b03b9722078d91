from __future__ import annotations

import json
import threading

from onebox.application.supervisor import HealthStatus
from onebox.cli import worker
from onebox.infrastructure.email.accounts import AccountDescriptor
from onebox.infrastructure.settings import Settings
from tests.fakes import FakeSession, make_message


class AllDone:
    """Stops the worker once every session has finished its script."""

    def __init__(self, stop_event: threading.Event) -> None:
        self.stop_event = stop_event
        self.pending: set[int] = set()
        self.lock = threading.Lock()

    def part(self) -> threading.Event:
        done = self
        key = len(self.pending)
        self.pending.add(key)

        class Part(threading.Event):
            def set(self) -> None:
                super().set()
                with done.lock:
                    done.pending.discard(key)
                    if not done.pending:
                        done.stop_event.set()

        return Part()


def test_main_without_mailboxes_exits_with_error(monkeypatch) -> None:
    monkeypatch.setattr(worker, "get_settings", lambda: Settings(_env_file=None, imap_accounts=None, imap_mailboxes=None))

    assert worker.main() == 1


def test_main_with_invalid_mailbox_config_exits_with_error(monkeypatch) -> None:
    settings = Settings(_env_file=None, imap_accounts=json.dumps([{"host": "h", "user": "u"}]))
    monkeypatch.setattr(worker, "get_settings", lambda: settings)

    assert worker.main() == 1


def test_worker_runs_each_account_in_its_own_thread(monkeypatch, processor, store) -> None:
    settings = Settings(_env_file=None, stats_interval_seconds=0.01)
    accounts = [
        AccountDescriptor(host="imap.example.com", user="a@example.com", secret="pw"),
        AccountDescriptor(host="imap.example.com", user="b@example.com", secret="pw"),
    ]
    app = worker.EmailWorker(accounts, processor, settings)
    done = AllDone(app.stop_event)
    sessions = {
        acc.user: FakeSession(range_messages=[make_message(1)], watch_script=[False], stop_event=done.part())
        for acc in accounts
    }
    monkeypatch.setattr(worker, "session_factory", lambda s: lambda acc: sessions[acc.user])

    assert app.run() == 0

    assert {s.name for s in app.supervisors} == {"a@example.com", "b@example.com"}
    assert {s.thread.name for s in app.supervisors} == {"sync-a@example.com", "sync-b@example.com"}
    assert all(s.health.processed == 1 for s in app.supervisors)
    assert len(store.docs) == 2
    assert all(s.health.status is HealthStatus.STOPPED for s in app.supervisors)
