"""Terminal outcome contracts and run statistics.

Outcome is a tagged union of frozen dataclasses. Each variant exposes a
``kind`` discriminator so formatters and exporters can switch on it without
isinstance chains, and ``to_dict()`` for report serialization.

RunStats is the immutable snapshot exposed by the ledger. Derived counters
are properties over ``outcomes`` so they can never drift from the recorded
sequence.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from retarget.contracts.enums import AbortReason, OutcomeKind, RunStatus, SkipReason


@dataclass(frozen=True, slots=True)
class Success:
    """Record rewritten and the save confirmed by the editor closing."""

    index: int
    old_value: str
    new_value: str

    @property
    def kind(self) -> OutcomeKind:
        return OutcomeKind.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "index": self.index,
            "old_value": self.old_value,
            "new_value": self.new_value,
        }


@dataclass(frozen=True, slots=True)
class Failed:
    """Record-level abort.

    ``observed_value`` is set for VALUE_MISMATCH (the value actually read
    inside the editor). ``unconfirmed`` marks the ambiguous save case, which
    must not be counted as either a success or a definite failure.
    """

    index: int
    reason: AbortReason
    observed_value: str | None = None

    @property
    def kind(self) -> OutcomeKind:
        return OutcomeKind.FAILED

    @property
    def unconfirmed(self) -> bool:
        return self.reason.is_ambiguous

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "index": self.index,
            "reason": self.reason.value,
            "observed_value": self.observed_value,
            "unconfirmed": self.unconfirmed,
        }


@dataclass(frozen=True, slots=True)
class Skipped:
    """Record was not a candidate for mutation."""

    index: int
    observed_value: str | None
    reason: SkipReason = SkipReason.NO_MATCH

    @property
    def kind(self) -> OutcomeKind:
        return OutcomeKind.SKIPPED

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "index": self.index,
            "observed_value": self.observed_value,
            "reason": self.reason.value,
        }


@dataclass(frozen=True, slots=True)
class Error:
    """Unexpected exception while processing a record."""

    index: int
    message: str

    @property
    def kind(self) -> OutcomeKind:
        return OutcomeKind.ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "index": self.index,
            "message": self.message,
        }


Outcome = Success | Failed | Skipped | Error
"""Terminal classification of one record's processing attempt."""


@dataclass(frozen=True, slots=True)
class RunStats:
    """Immutable snapshot of a run.

    Produced by OutcomeLedger.snapshot(). While the run is active,
    ``ended_at`` is None and ``status`` is RUNNING.
    """

    run_id: str
    expected_old: str
    desired_new: str
    status: RunStatus
    started_at: datetime
    ended_at: datetime | None
    processed_count: int
    total_count: int
    matched_count: int
    outcomes: tuple[Outcome, ...]
    error: str | None = None

    @property
    def is_sealed(self) -> bool:
        return self.ended_at is not None

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, Success))

    @property
    def failed(self) -> int:
        """Definite failures only; unconfirmed saves are counted separately."""
        return sum(1 for o in self.outcomes if isinstance(o, Failed) and not o.unconfirmed)

    @property
    def unconfirmed(self) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, Failed) and o.unconfirmed)

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, Skipped))

    @property
    def errored(self) -> int:
        return sum(1 for o in self.outcomes if isinstance(o, Error))

    @property
    def duration_seconds(self) -> float | None:
        if self.ended_at is None:
            return None
        return (self.ended_at - self.started_at).total_seconds()

    def outcome_for(self, index: int) -> Outcome | None:
        """Return the outcome recorded for a listing index, if visited."""
        for outcome in self.outcomes:
            if outcome.index == index:
                return outcome
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "expected_old": self.expected_old,
            "desired_new": self.desired_new,
            "status": self.status.value,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_seconds": self.duration_seconds,
            "processed_count": self.processed_count,
            "total_count": self.total_count,
            "matched_count": self.matched_count,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "unconfirmed": self.unconfirmed,
            "skipped": self.skipped,
            "errored": self.errored,
            "error": self.error,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
