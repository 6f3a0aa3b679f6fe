"""Exception contracts shared across the engine, CLI, and drivers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from retarget.contracts.outcomes import RunStats


class PreconditionError(ValueError):
    """Raised when a run is requested with invalid values.

    Raised before any state mutation: no ledger is created, the previous
    run's stats stay current, and no input is disabled.
    """


class OrchestrationInvariantError(Exception):
    """Raised when an internal invariant is violated.

    Indicates a bug in retarget itself (illegal state transition, duplicate
    outcome for a record), never a surface failure.
    """


class SurfaceError(Exception):
    """Raised by drivers when the surface cannot be read or driven at all."""


class ListingUnavailableError(SurfaceError):
    """Raised when the record listing cannot be obtained."""


class SurfaceCleanupError(SurfaceError):
    """Raised when the editor or menu is still open after cleanup.

    Leaving either open would make the next record operate on a stale
    surface. The state machine keeps an outcome it already decided and logs
    this; it only propagates when no outcome was reached.
    """

    def __init__(self, index: int, *, editor_open: bool, menu_open: bool) -> None:
        self.index = index
        self.editor_open = editor_open
        self.menu_open = menu_open
        left_open = [name for name, is_open in (("editor", editor_open), ("menu", menu_open)) if is_open]
        super().__init__(f"Record {index}: {' and '.join(left_open)} still open after cleanup")


class RunFailedError(Exception):
    """Raised when a run aborts on a run-level error.

    Carries the sealed stats so callers can still report what was recorded
    before the failure.

    Attributes:
        stats: Sealed RunStats with status FAILED.
    """

    def __init__(self, stats: RunStats, cause: BaseException) -> None:
        self.stats = stats
        self.cause = cause
        super().__init__(f"Run {stats.run_id} failed after {stats.processed_count}/{stats.total_count} records: {cause}")


class UnknownDriverError(KeyError):
    """Raised when settings name a surface driver nobody registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = available
        super().__init__(f"Unknown surface driver '{name}'. Available: {available}")
