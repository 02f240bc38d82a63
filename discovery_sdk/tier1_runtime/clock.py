"""
discovery_sdk.tier1_runtime.clock
──────────────────────────────────
Injectable time source. The identity coordinator stamps every snapshot change
with `Clock.now_ms()`; tests pass a frozen or stepping clock instead of
patching time.time().
"""
from __future__ import annotations

import itertools
import time
from datetime import datetime, timezone
from typing import Callable, Iterator


class Clock:
    """Wall clock in UTC. Override now_ms_fn to control time in tests."""

    def __init__(self, now_ms_fn: Callable[[], int] | None = None) -> None:
        self._now_ms_fn = now_ms_fn or (lambda: time.time_ns() // 1_000_000)

    def now_ms(self) -> int:
        """Milliseconds since the Unix epoch."""
        return self._now_ms_fn()

    def now(self) -> datetime:
        return datetime.fromtimestamp(self.now_ms() / 1000, tz=timezone.utc)

    @classmethod
    def frozen(cls, epoch_ms: int) -> "Clock":
        """A clock that always reports *epoch_ms*."""
        return cls(now_ms_fn=lambda: epoch_ms)

    @classmethod
    def stepping(cls, start_ms: int, step_ms: int = 1) -> "Clock":
        """A clock that advances by *step_ms* on every read."""
        ticks: Iterator[int] = itertools.count(start_ms, step_ms)
        return cls(now_ms_fn=ticks.__next__)


_clock = Clock()


def get_clock() -> Clock:
    """Return the default clock."""
    return _clock


def set_clock(clock: Clock) -> None:
    """Replace the default clock (use in tests)."""
    global _clock
    _clock = clock


__all__ = ["Clock", "get_clock", "set_clock"]
