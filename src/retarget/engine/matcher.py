"""Record matcher: decides whether a listed record is a mutation candidate.

Matching is exact string equality against the value currently rendered in
the listing. No normalization and no case-folding: ``A.example`` does not
match ``a.example``. A record whose cell cannot be read is never a
candidate; it is skipped with its own reason so reports can tell it apart
from an ordinary non-match.
"""

from __future__ import annotations

from collections.abc import Sequence

from retarget.contracts import MatchDecision, PreviewResult, RecordRef, SkipReason, SurfaceDriver


class RecordMatcher:
    """Classifies listed records against an expected value. Pure read."""

    def __init__(self, driver: SurfaceDriver) -> None:
        self._driver = driver

    def classify(self, record: RecordRef, expected_old: str) -> MatchDecision:
        """Read the record's listed value and compare it to ``expected_old``."""
        value = self._driver.read_listed_value(record)
        observed = record.observed(value)
        if value is None:
            return MatchDecision(record=observed, is_match=False, skip_reason=SkipReason.FIELD_UNREADABLE)
        if value == expected_old:
            return MatchDecision(record=observed, is_match=True)
        return MatchDecision(record=observed, is_match=False, skip_reason=SkipReason.NO_MATCH)

    def preview(self, records: Sequence[RecordRef], expected_old: str) -> PreviewResult:
        """Classify a whole snapshot without touching any editor."""
        matching: list[int] = []
        unreadable: list[int] = []
        for record in records:
            decision = self.classify(record, expected_old)
            if decision.is_match:
                matching.append(record.index)
            elif decision.skip_reason == SkipReason.FIELD_UNREADABLE:
                unreadable.append(record.index)
        return PreviewResult(
            expected_old=expected_old,
            total_count=len(records),
            matching_indices=tuple(matching),
            unreadable_indices=tuple(unreadable),
        )
