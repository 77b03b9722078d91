"""Backoff helpers shared by the watch loop and the account supervisor."""

from __future__ import annotations

import random
from typing import Optional


class WatchRetryBudgetExceeded(RuntimeError):
    """Too many consecutive transient failures in the watch loop."""


def backoff_delay(
    attempt: int,
    base: float,
    cap: float,
    rng: Optional[random.Random] = None,
) -> float:
    """Exponential backoff with equal jitter: a value in [d/2, d], d = min(cap, base * 2**attempt)."""
    delay = min(cap, base * (2 ** max(attempt, 0)))
    if delay <= 0:
        return 0.0
    uniform = rng.uniform if rng is not None else random.uniform
    return uniform(delay / 2, delay)


class RetryBudget:
    """Counts consecutive failures; ``record_failure`` raises once the budget is spent."""

    def __init__(self, max_retries: int) -> None:
        self.max_retries = max_retries
        self.failures = 0

    def record_failure(self, error: BaseException) -> int:
        """Return the zero-based attempt number for the next backoff."""
        self.failures += 1
        if self.failures > self.max_retries:
            raise WatchRetryBudgetExceeded(
                f"Gave up after {self.failures} consecutive failures: {error}"
            ) from error
        return self.failures - 1

    def reset(self) -> None:
        self.failures = 0
