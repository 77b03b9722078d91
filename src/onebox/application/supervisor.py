"""Run each account's sync loop in its own supervised thread."""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from loguru import logger

from onebox.application.retry import backoff_delay


class HealthStatus(str, Enum):
    STARTING = "starting"
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    RESTARTING = "restarting"
    FAILED = "failed"
    STOPPED = "stopped"


@dataclass
class AccountHealth:
    """Per-account counters and status, written by the account's own thread."""

    name: str
    status: HealthStatus = HealthStatus.STARTING
    processed: int = 0
    skipped: int = 0
    errors: int = 0
    restarts: int = 0
    last_error: Optional[str] = None
    last_activity: Optional[datetime] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _set(self, **changes: Any) -> None:
        with self._lock:
            for key, value in changes.items():
                setattr(self, key, value)

    def _touch(self) -> datetime:
        return datetime.now(timezone.utc)

    def record_processed(self) -> None:
        with self._lock:
            self.processed += 1
            self.last_activity = self._touch()

    def record_skipped(self) -> None:
        with self._lock:
            self.skipped += 1
            self.last_activity = self._touch()

    def record_error(self, error: BaseException) -> None:
        with self._lock:
            self.errors += 1
            self.last_error = str(error)

    def mark_healthy(self) -> None:
        if self.status is not HealthStatus.HEALTHY:
            self._set(status=HealthStatus.HEALTHY)

    def mark_degraded(self, reason: str) -> None:
        self._set(status=HealthStatus.DEGRADED, last_error=reason)

    def mark_restarting(self) -> None:
        with self._lock:
            self.status = HealthStatus.RESTARTING
            self.restarts += 1

    def mark_failed(self, reason: str) -> None:
        self._set(status=HealthStatus.FAILED, last_error=reason)

    def mark_stopped(self) -> None:
        self._set(status=HealthStatus.STOPPED)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "name": self.name,
                "status": self.status.value,
                "processed": self.processed,
                "skipped": self.skipped,
                "errors": self.errors,
                "restarts": self.restarts,
                "last_error": self.last_error,
                "last_activity": self.last_activity.isoformat() if self.last_activity else None,
            }


@dataclass(frozen=True)
class RestartPolicy:
    base_seconds: float = 5.0
    max_seconds: float = 300.0
    max_attempts: int = 0  # 0 = unlimited
    reset_after_seconds: float = 600.0

    @classmethod
    def from_settings(cls, settings) -> RestartPolicy:
        return cls(
            base_seconds=settings.restart_base_seconds,
            max_seconds=settings.restart_max_seconds,
            max_attempts=settings.restart_max_attempts,
            reset_after_seconds=settings.restart_reset_seconds,
        )


class SyncLoop(Protocol):
    def run(self, stop_event: threading.Event) -> None: ...


class AccountSupervisor:
    """
    Keeps one account's sync loop alive.

    Any error escaping the loop triggers a restart after an exponential
    backoff with jitter. After ``max_attempts`` consecutive failures the
    circuit opens and the account is reported as failed; other accounts
    are unaffected since nothing is shared between supervisors.
    """

    def __init__(
        self,
        name: str,
        loop_factory: Callable[[AccountHealth], SyncLoop],
        policy: RestartPolicy = RestartPolicy(),
        stop_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.name = name
        self.loop_factory = loop_factory
        self.policy = policy
        self.stop_event = stop_event or threading.Event()
        self.clock = clock
        self.rng = rng
        self.health = AccountHealth(name=name)
        self.thread: Optional[threading.Thread] = None

    def start(self) -> threading.Thread:
        self.thread = threading.Thread(target=self.run, name=f"sync-{self.name}", daemon=True)
        self.thread.start()
        return self.thread

    def run(self) -> None:
        failures = 0

        while not self.stop_event.is_set():
            started = self.clock()
            try:
                self.loop_factory(self.health).run(self.stop_event)
            except Exception as e:
                if self.clock() - started >= self.policy.reset_after_seconds:
                    failures = 0
                failures += 1
                self.health.record_error(e)
                logger.error(f"[{self.name}] Sync loop failed ({failures} in a row): {e}")

                if self.policy.max_attempts and failures >= self.policy.max_attempts:
                    self.health.mark_failed(str(e))
                    logger.error(f"[{self.name}] Giving up after {failures} consecutive failures")
                    return

                delay = backoff_delay(
                    failures - 1, self.policy.base_seconds, self.policy.max_seconds, self.rng
                )
                self.health.mark_restarting()
                logger.info(f"[{self.name}] Restarting sync loop in {delay:.1f}s")
                self.stop_event.wait(delay)
            else:
                if not self.stop_event.is_set():
                    delay = backoff_delay(0, self.policy.base_seconds, self.policy.max_seconds, self.rng)
                    self.health.mark_restarting()
                    logger.warning(f"[{self.name}] Sync loop returned unexpectedly, restarting in {delay:.1f}s")
                    self.stop_event.wait(delay)

        self.health.mark_stopped()
        logger.info(f"[{self.name}] Supervisor stopped")
