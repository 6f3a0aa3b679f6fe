# tests/property/engine/test_ledger_properties.py
"""Property-based tests for OutcomeLedger.

Properties:
- Derived counters always partition the recorded outcomes
- One outcome per index: any duplicate is rejected, whatever came before
- processed_count never exceeds total_count
- Snapshots taken earlier are never affected by later appends
"""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from retarget.contracts import (
    AbortReason,
    Error,
    Failed,
    OrchestrationInvariantError,
    Outcome,
    RunStatus,
    Skipped,
    SkipReason,
    Success,
)
from retarget.engine.ledger import OutcomeLedger

# =============================================================================
# Strategies
# =============================================================================


def outcome_for(index: int) -> st.SearchStrategy[Outcome]:
    return st.one_of(
        st.just(Success(index=index, old_value="a.example", new_value="c.example")),
        st.builds(Failed, index=st.just(index), reason=st.sampled_from(list(AbortReason))),
        st.builds(Skipped, index=st.just(index), observed_value=st.none() | st.text(max_size=5), reason=st.sampled_from(list(SkipReason))),
        st.builds(Error, index=st.just(index), message=st.text(max_size=10)),
    )


@st.composite
def outcome_sequences(draw: st.DrawFn) -> list[Outcome]:
    count = draw(st.integers(min_value=0, max_value=30))
    return [draw(outcome_for(index)) for index in range(1, count + 1)]


# =============================================================================
# Properties
# =============================================================================


class TestLedgerProperties:
    @given(outcomes=outcome_sequences())
    @settings(max_examples=100)
    def test_counters_partition_outcomes(self, outcomes: list[Outcome]) -> None:
        ledger = OutcomeLedger("a.example", "c.example")
        ledger.set_total(len(outcomes))
        for outcome in outcomes:
            ledger.mark_visited()
            ledger.append(outcome)

        stats = ledger.seal(RunStatus.COMPLETED)

        assert stats.processed_count == len(outcomes) == len(stats.outcomes)
        assert stats.succeeded + stats.failed + stats.unconfirmed + stats.skipped + stats.errored == len(outcomes)
        assert stats.unconfirmed == sum(1 for o in outcomes if isinstance(o, Failed) and o.reason == AbortReason.SAVE_NO_CONFIRMATION)
        for outcome in outcomes:
            assert stats.outcome_for(outcome.index) == outcome

    @given(outcomes=outcome_sequences().filter(bool), data=st.data())
    @settings(max_examples=100)
    def test_duplicate_index_always_rejected(self, outcomes: list[Outcome], data: st.DataObject) -> None:
        ledger = OutcomeLedger("a.example", "c.example")
        for outcome in outcomes:
            ledger.append(outcome)
        duplicate_index = data.draw(st.sampled_from([o.index for o in outcomes]))

        with pytest.raises(OrchestrationInvariantError):
            ledger.append(data.draw(outcome_for(duplicate_index)))

        assert len(ledger.snapshot().outcomes) == len(outcomes)

    @given(total=st.integers(min_value=0, max_value=20), visits=st.integers(min_value=0, max_value=40))
    @settings(max_examples=100)
    def test_processed_never_exceeds_total(self, total: int, visits: int) -> None:
        ledger = OutcomeLedger("a.example", "c.example")
        ledger.set_total(total)
        for _ in range(visits):
            try:
                ledger.mark_visited()
            except OrchestrationInvariantError:
                break

        stats = ledger.snapshot()
        assert stats.processed_count == min(total, visits)
        assert stats.processed_count <= stats.total_count

    @given(outcomes=outcome_sequences(), cut=st.integers(min_value=0, max_value=30))
    @settings(max_examples=50)
    def test_earlier_snapshots_unaffected(self, outcomes: list[Outcome], cut: int) -> None:
        ledger = OutcomeLedger("a.example", "c.example")
        cut = min(cut, len(outcomes))
        for outcome in outcomes[:cut]:
            ledger.append(outcome)
        early = ledger.snapshot()
        for outcome in outcomes[cut:]:
            ledger.append(outcome)

        assert early.outcomes == tuple(outcomes[:cut])
