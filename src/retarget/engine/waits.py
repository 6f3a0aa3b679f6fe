"""Bounded-wait polling for externally driven surface state changes.

The surface changes state on its own schedule (menus animate open, editors
render, a save round-trips to the server). Instead of blocking on it, the
engine checks an observable condition at a fixed interval until it holds
or a per-wait timeout elapses, and gets an explicit result either way.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TypeVar

from retarget.engine.clock import Clock

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class WaitResult:
    """Outcome of a bounded wait.

    Attributes:
        satisfied: The condition held before the timeout.
        elapsed: Seconds spent waiting (clock time).
        checks: How many times the condition was evaluated.
    """

    satisfied: bool
    elapsed: float
    checks: int

    def __bool__(self) -> bool:
        return self.satisfied


def poll_until(
    condition: Callable[[], bool],
    *,
    timeout: float,
    interval: float,
    clock: Clock,
) -> WaitResult:
    """Check ``condition`` until it holds or ``timeout`` seconds elapse.

    The condition is always checked at least once, and once more at the
    deadline, so a zero timeout is a single immediate check.

    Args:
        condition: Side-effect-free check of the surface.
        timeout: Upper bound for this wait, in seconds.
        interval: Delay between checks, in seconds.
        clock: Clock providing time and sleep.
    """
    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")
    start = clock.monotonic()
    deadline = start + timeout
    checks = 0
    while True:
        checks += 1
        if condition():
            return WaitResult(satisfied=True, elapsed=clock.monotonic() - start, checks=checks)
        now = clock.monotonic()
        if now >= deadline:
            return WaitResult(satisfied=False, elapsed=now - start, checks=checks)
        clock.sleep(min(interval, deadline - now))


def first_resolved(resolvers: Iterable[Callable[[], T | None]]) -> T | None:
    """Try resolvers in priority order; return the first non-None result."""
    for resolve in resolvers:
        result = resolve()
        if result is not None:
            return result
    return None
