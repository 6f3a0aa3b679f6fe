# tests/property/engine/test_orchestrator_properties.py
"""Property-based tests for full runs against a randomly faulty surface.

Each example builds a listing of two candidate values with at most one
scripted fault per record, runs it with the mock clock, and checks the
run-level invariants:

- every listed record is visited exactly once, in listing order
- matched records all end in a non-skip outcome, non-matches are skipped
- a record is only ever changed by a Success or an unconfirmed save
- the surface is left with no editor or menu open
- a second identical run changes nothing that the first run updated
"""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from retarget.contracts import Error, Failed, RunStatus, Skipped, SkipReason, Success
from retarget.engine.clock import MockClock
from retarget.engine.orchestrator import Orchestrator
from retarget.testing.chaossurface import RecordFault, SimulatedSurface

OLD = "a.example"
NEW = "c.example"

# =============================================================================
# Strategies
# =============================================================================

listed_values = st.sampled_from([OLD, "b.example"])
record_faults = st.none() | st.sampled_from(list(RecordFault))


@st.composite
def listings(draw: st.DrawFn) -> tuple[list[str], dict[int, list[RecordFault]]]:
    rows = draw(st.lists(st.tuples(listed_values, record_faults), max_size=12))
    values = [value for value, _ in rows]
    faults = {index: [fault] for index, (_, fault) in enumerate(rows, start=1) if fault is not None}
    return values, faults


def build(values: list[str], faults: dict[int, list[RecordFault]]) -> tuple[SimulatedSurface, Orchestrator]:
    clock = MockClock()
    surface = SimulatedSurface.from_values(values, faults=faults, clock=clock)
    return surface, Orchestrator(surface, clock=clock)


# =============================================================================
# Properties
# =============================================================================


class TestRunProperties:
    @given(listing=listings())
    @settings(max_examples=100)
    def test_each_record_visited_once_in_order(self, listing) -> None:
        values, faults = listing
        surface, orchestrator = build(values, faults)

        stats = orchestrator.run(OLD, NEW)

        assert stats.status == RunStatus.COMPLETED
        assert stats.processed_count == stats.total_count == len(values)
        assert [o.index for o in stats.outcomes] == list(range(1, len(values) + 1))

    @given(listing=listings())
    @settings(max_examples=100)
    def test_classification_matches_listing(self, listing) -> None:
        values, faults = listing
        surface, orchestrator = build(values, faults)

        stats = orchestrator.run(OLD, NEW)

        for outcome in stats.outcomes:
            unreadable = RecordFault.LISTED_VALUE_UNREADABLE in surface.faults_for(outcome.index)
            listed_match = values[outcome.index - 1] == OLD and not unreadable
            if listed_match:
                assert not isinstance(outcome, Skipped)
            else:
                assert isinstance(outcome, Skipped)
                expected_reason = SkipReason.FIELD_UNREADABLE if unreadable else SkipReason.NO_MATCH
                assert outcome.reason == expected_reason
        assert stats.matched_count == stats.succeeded + stats.failed + stats.unconfirmed + stats.errored

    @given(listing=listings())
    @settings(max_examples=100)
    def test_only_successes_and_unconfirmed_saves_change_records(self, listing) -> None:
        values, faults = listing
        surface, orchestrator = build(values, faults)
        before = surface.live_values

        stats = orchestrator.run(OLD, NEW)

        for outcome in stats.outcomes:
            live = surface.live_value(outcome.index)
            if isinstance(outcome, Success):
                assert live == NEW
            elif isinstance(outcome, Failed) and outcome.unconfirmed:
                assert live in (before[outcome.index - 1], NEW)
            else:
                assert isinstance(outcome, Failed | Skipped | Error)
                assert live == before[outcome.index - 1]

    @given(listing=listings())
    @settings(max_examples=100)
    def test_surface_left_closed(self, listing) -> None:
        values, faults = listing
        surface, orchestrator = build(values, faults)

        records = surface.list_records()
        orchestrator.run(OLD, NEW)

        assert not surface.is_editor_open()
        assert not any(surface.is_menu_open(record) for record in records)

    @given(listing=listings())
    @settings(max_examples=50)
    def test_second_run_leaves_updated_records_alone(self, listing) -> None:
        values, faults = listing
        surface, orchestrator = build(values, faults)

        first = orchestrator.run(OLD, NEW)
        updated = {o.index for o in first.outcomes if isinstance(o, Success)}
        second = orchestrator.run(OLD, NEW)

        for index in updated:
            outcome = second.outcome_for(index)
            assert isinstance(outcome, Skipped)
            assert outcome.observed_value == NEW
