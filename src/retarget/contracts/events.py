"""Observability events for run execution.

Emitted by the orchestrator on the EventBus and consumed by the CLI
formatters (console or JSON). RecordProcessed doubles as the periodic
stats-snapshot feed for progress display.
"""

from dataclasses import dataclass
from enum import StrEnum

from retarget.contracts.enums import RunStatus
from retarget.contracts.outcomes import Outcome, RunStats


class RunCompletionStatus(StrEnum):
    """Final status for RunSummary events."""

    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class RunStarted:
    """Emitted once the listing snapshot has been taken."""

    run_id: str
    expected_old: str
    desired_new: str
    total_count: int


@dataclass(frozen=True, slots=True)
class RecordProcessed:
    """Emitted after each visited record reaches its terminal outcome.

    Attributes:
        outcome: The outcome just appended to the ledger.
        stats: Ledger snapshot taken right after the append.
    """

    outcome: Outcome
    stats: RunStats


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Emitted when a run ends, however it ends.

    exit_code: 0=completed, 1=partial, 2=failed, 3=cancelled.
    """

    stats: RunStats
    status: RunCompletionStatus
    exit_code: int

    @classmethod
    def from_stats(cls, stats: RunStats) -> "RunSummary":
        """Derive completion status and exit code from sealed stats."""
        if stats.status == RunStatus.FAILED:
            return cls(stats=stats, status=RunCompletionStatus.FAILED, exit_code=2)
        if stats.status == RunStatus.CANCELLED:
            return cls(stats=stats, status=RunCompletionStatus.CANCELLED, exit_code=3)
        if stats.failed or stats.unconfirmed or stats.errored:
            return cls(stats=stats, status=RunCompletionStatus.PARTIAL, exit_code=1)
        return cls(stats=stats, status=RunCompletionStatus.COMPLETED, exit_code=0)
