"""Monotonic clock source used for drift-free elapsed-time measurement."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable, Optional


class MonotonicClock:
    """Supplies monotonic instants immune to wall-clock adjustments."""

    def __init__(self, monotonic_fn: Optional[Callable[[], float]] = None):
        self._monotonic = monotonic_fn or time.monotonic
        self._last = float("-inf")

    def now(self) -> float:
        # Clamp so a misbehaving injected source can never run backwards.
        value = self._monotonic()
        if value < self._last:
            return self._last
        self._last = value
        return value

    def elapsed(self, since: float) -> float:
        return max(0.0, self.now() - since)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
