"""Record-level contracts: listing handles and match decisions."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from retarget.contracts.enums import SkipReason


@dataclass(frozen=True, slots=True)
class RecordRef:
    """Handle to one row of a listing snapshot.

    Attributes:
        index: 1-based position at listing time, stable for the run.
        observed_value: Value read from the listing at classification time.
            None until classified, and stays None when the cell is unreadable.
        row: Opaque driver handle for the row. Only the driver interprets it.
    """

    index: int
    observed_value: str | None = None
    row: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.index < 1:
            raise ValueError(f"RecordRef.index is 1-based, got {self.index}")

    def observed(self, value: str | None) -> RecordRef:
        """Return a copy carrying the value read at classification time."""
        return replace(self, observed_value=value)


@dataclass(frozen=True, slots=True)
class MatchDecision:
    """Classification of one record against the expected value.

    Derived and transient: never stored beyond the loop iteration that
    produced it.
    """

    record: RecordRef
    is_match: bool
    skip_reason: SkipReason | None = None

    def __post_init__(self) -> None:
        if self.is_match and self.skip_reason is not None:
            raise ValueError("A matching record cannot carry a skip reason")
        if not self.is_match and self.skip_reason is None:
            raise ValueError("A skipped record must carry a skip reason")


@dataclass(frozen=True, slots=True)
class PreviewResult:
    """Dry classification of a whole listing, no editor touched."""

    expected_old: str
    total_count: int
    matching_indices: tuple[int, ...]
    unreadable_indices: tuple[int, ...] = ()

    @property
    def matching_count(self) -> int:
        return len(self.matching_indices)
