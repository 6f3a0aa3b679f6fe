# src/retarget/engine/ledger.py
"""Outcome ledger: append-only record of a run's terminal outcomes.

One ledger per run. The run loop is the only writer; ``snapshot()`` may be
called from any thread at any time (a progress display, a ``get_stats()``
call from a signal handler) and always returns an immutable RunStats.
"""

from __future__ import annotations

import threading
import uuid
from datetime import UTC, datetime

from retarget.contracts import (
    OrchestrationInvariantError,
    Outcome,
    RunStats,
    RunStatus,
)


class OutcomeLedger:
    """Lock-protected accumulator of outcomes and counters for one run.

    Example:
        ledger = OutcomeLedger("a.example", "c.example")
        ledger.set_total(3)
        ledger.mark_visited()
        ledger.append(Skipped(index=1, observed_value="b.example"))
        ledger.seal(RunStatus.COMPLETED)
        stats = ledger.snapshot()
    """

    def __init__(self, expected_old: str, desired_new: str, *, run_id: str | None = None) -> None:
        self._lock = threading.Lock()
        self._run_id = run_id if run_id is not None else uuid.uuid4().hex
        self._expected_old = expected_old
        self._desired_new = desired_new
        self._started_at = datetime.now(UTC)
        self._ended_at: datetime | None = None
        self._status = RunStatus.RUNNING
        self._error: str | None = None
        self._total = 0
        self._processed = 0
        self._matched = 0
        self._outcomes: list[Outcome] = []
        self._indices: set[int] = set()

    @property
    def run_id(self) -> str:
        return self._run_id

    def set_total(self, total: int) -> None:
        """Record the size of the listing snapshot."""
        with self._lock:
            self._check_open()
            if total < 0:
                raise OrchestrationInvariantError(f"total_count cannot be negative, got {total}")
            if self._processed > total:
                raise OrchestrationInvariantError(f"total_count {total} below processed_count {self._processed}")
            self._total = total

    def mark_visited(self) -> None:
        """Count a record whose processing has begun."""
        with self._lock:
            self._check_open()
            if self._processed + 1 > self._total:
                raise OrchestrationInvariantError(
                    f"processed_count would exceed total_count ({self._processed + 1} > {self._total})"
                )
            self._processed += 1

    def record_match(self) -> None:
        """Count a record that matched at listing time."""
        with self._lock:
            self._check_open()
            self._matched += 1

    def append(self, outcome: Outcome) -> None:
        """Append a terminal outcome.

        Raises:
            OrchestrationInvariantError: If the index already has an outcome
                or the ledger is sealed.
        """
        with self._lock:
            self._check_open()
            if outcome.index in self._indices:
                raise OrchestrationInvariantError(f"Record {outcome.index} already has an outcome")
            self._indices.add(outcome.index)
            self._outcomes.append(outcome)

    def seal(self, status: RunStatus, error: str | None = None) -> RunStats:
        """Close the ledger with a final status and return the sealed snapshot."""
        if status == RunStatus.RUNNING:
            raise OrchestrationInvariantError("Cannot seal a ledger as running")
        with self._lock:
            self._check_open()
            self._status = status
            self._error = error
            self._ended_at = datetime.now(UTC)
            return self._build_snapshot()

    @property
    def is_sealed(self) -> bool:
        with self._lock:
            return self._ended_at is not None

    def snapshot(self) -> RunStats:
        with self._lock:
            return self._build_snapshot()

    def _check_open(self) -> None:
        if self._ended_at is not None:
            raise OrchestrationInvariantError(f"Ledger for run {self._run_id} is already sealed")

    def _build_snapshot(self) -> RunStats:
        return RunStats(
            run_id=self._run_id,
            expected_old=self._expected_old,
            desired_new=self._desired_new,
            status=self._status,
            started_at=self._started_at,
            ended_at=self._ended_at,
            processed_count=self._processed,
            total_count=self._total,
            matched_count=self._matched,
            outcomes=tuple(self._outcomes),
            error=self._error,
        )
