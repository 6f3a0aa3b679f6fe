# src/retarget/engine/clock.py
"""Clock abstraction for testable waits and settle delays.

Every suspension point of a run (bounded waits for the surface, settle
delays between steps and records) goes through a Clock, so tests can run
the full state machine deterministically without real sleeps.

Production code uses SystemClock (the default).
Tests inject MockClock, whose sleep() simply advances its time.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Abstract clock for waits and delays.

    Implementations:
    - SystemClock: time.monotonic() / time.sleep() (production)
    - MockClock: controllable time, sleep advances it (testing)
    """

    def monotonic(self) -> float:
        """Return monotonic time in seconds.

        Must never go backwards; used for elapsed time and timeouts.
        """
        ...

    def sleep(self, seconds: float) -> None:
        """Suspend for ``seconds``. The only place a run yields time."""
        ...


class SystemClock:
    """Production clock using time.monotonic() and time.sleep()."""

    def monotonic(self) -> float:
        """Return system monotonic time."""
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        """Block the calling thread."""
        if seconds > 0:
            time.sleep(seconds)


class MockClock:
    """Controllable clock for deterministic testing.

    sleep() advances time instantly, so a bounded wait against a surface that
    never changes state runs its full timeout in zero wall time.

    Example:
        clock = MockClock(start=0.0)
        result = poll_until(lambda: False, timeout=2.0, interval=0.1, clock=clock)
        assert not result.satisfied
        assert clock.monotonic() >= 2.0
    """

    def __init__(self, start: float = 0.0) -> None:
        """Initialize mock clock at a given time.

        Args:
            start: Initial monotonic time value (default 0.0).
        """
        self._current = start
        self._slept: list[float] = []

    def monotonic(self) -> float:
        """Return current mock time."""
        return self._current

    def sleep(self, seconds: float) -> None:
        """Advance time instead of blocking, recording the request."""
        self._slept.append(seconds)
        if seconds > 0:
            self._current += seconds

    @property
    def sleeps(self) -> list[float]:
        """Every sleep requested so far, in order."""
        return list(self._slept)

    def advance(self, seconds: float) -> None:
        """Advance mock time by specified seconds.

        Raises:
            ValueError: If seconds is negative.
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance time by negative amount: {seconds}")
        self._current += seconds


# Default clock for production use
DEFAULT_CLOCK: Clock = SystemClock()
