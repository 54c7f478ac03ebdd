"""Millisecond clock sources.

Every wall-clock gate in the game (jump window, fades, countdown,
race timer) reads one of these.
"""

import time
from typing import Protocol


class Clock(Protocol):
    """Monotonic millisecond timestamp provider."""

    def now_ms(self) -> float:
        ...


class MonotonicClock:
    """Production clock backed by time.monotonic()."""

    def now_ms(self) -> float:
        return time.monotonic() * 1000.0


class ManualClock:
    """Clock that only moves when told to. Used by tests and replays of input."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = start_ms

    def now_ms(self) -> float:
        return self._now

    def advance(self, delta_ms: float) -> float:
        self._now += delta_ms
        return self._now

    def set(self, now_ms: float) -> None:
        self._now = now_ms
