# src/retarget/engine/control.py
"""Run exclusivity and cooperative cancellation.

At most one run may be active per RunControl. Cancellation is cooperative:
``request_stop()`` only raises a flag; the run loop checks it between records
and never interrupts a record mid-flight, so an in-progress record always
reaches its terminal outcome before the run ends as CANCELLED.
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any


class RunControl:
    """Mutual exclusion of runs plus the stop flag of the active run.

    Thread-safe: a front end may call ``request_stop()`` from a signal
    handler or another thread while the run loop executes.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._running = False
        self._stop = threading.Event()

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def try_acquire(self) -> bool:
        """Claim the run slot. Returns False when a run is already active."""
        with self._lock:
            if self._running:
                return False
            self._running = True
            self._stop.clear()
            return True

    def request_stop(self) -> bool:
        """Ask the active run to stop after its current record.

        Returns:
            False when no run is active (the request is a no-op).
        """
        with self._lock:
            if not self._running:
                return False
            self._stop.set()
            return True

    def release(self) -> None:
        """Free the run slot. Called exactly once per successful try_acquire()."""
        with self._lock:
            self._running = False
            self._stop.clear()


@contextmanager
def stop_on_signals(control: RunControl) -> Iterator[RunControl]:
    """Install SIGINT/SIGTERM handlers that request a cooperative stop.

    On the first signal the active run is asked to stop and the default
    SIGINT handler is restored, so a second Ctrl-C interrupts immediately.
    A signal arriving while no run is active raises KeyboardInterrupt.

    Outside the main thread signal handlers cannot be installed; the control
    is yielded unchanged and can still be stopped programmatically.
    Original handlers are restored on exit (main thread only).
    """
    if threading.current_thread() is not threading.main_thread():
        yield control
        return

    original_sigint = signal.getsignal(signal.SIGINT)
    original_sigterm = signal.getsignal(signal.SIGTERM)

    def _handler(signum: int, frame: Any) -> None:
        if not control.request_stop():
            # No run yet (e.g. still at a confirmation prompt): plain interrupt
            raise KeyboardInterrupt
        signal.signal(signal.SIGINT, signal.default_int_handler)

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)
    try:
        yield control
    finally:
        signal.signal(signal.SIGINT, original_sigint)
        signal.signal(signal.SIGTERM, original_sigterm)
