# src/retarget/engine/orchestrator.py
"""Run orchestrator: the single-pass loop over a listing snapshot.

Owns the lifecycle of one run at a time:

1. Validate the (old, new) pair and claim the run slot
2. Disable presentation inputs
3. Snapshot the listing once
4. For each record, in listing order: check for a stop request, classify,
   then skip it or drive it through the editor state machine
5. Seal the ledger and emit the summary
6. Re-enable inputs, whatever happened

Record-level exceptions are isolated: the record gets an Error outcome and
the run continues. Anything that fails outside a record (the listing cannot
be read, an internal invariant breaks) seals the run as FAILED and is raised
as RunFailedError carrying the sealed stats.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from retarget.contracts import (
    ConfirmCallback,
    Error,
    InputGate,
    NullInputGate,
    OrchestrationInvariantError,
    Outcome,
    PreconditionError,
    PreviewResult,
    RecordProcessed,
    RecordRef,
    RunFailedError,
    RunStarted,
    RunStats,
    RunStatus,
    RunSummary,
    Skipped,
    SkipReason,
    SurfaceDriver,
)
from retarget.core.config import TimingSettings
from retarget.core.events import EventBus, ProgressSink
from retarget.engine.clock import DEFAULT_CLOCK, Clock
from retarget.engine.control import RunControl
from retarget.engine.editor import EditorStateMachine, TransitionHook
from retarget.engine.ledger import OutcomeLedger
from retarget.engine.matcher import RecordMatcher

logger = structlog.get_logger(__name__)


def validate_pair(expected_old: str, desired_new: str) -> tuple[str, str]:
    """Trim and validate an (old, new) pair.

    Raises:
        PreconditionError: If either value is empty or they are equal.
    """
    old = expected_old.strip()
    new = desired_new.strip()
    if not old or not new:
        raise PreconditionError("Both the current value and the new value are required")
    if old == new:
        raise PreconditionError(f"New value must differ from the current value ({old!r})")
    return old, new


class Orchestrator:
    """Runs bulk conditional retargeting against one surface driver.

    Example:
        orchestrator = Orchestrator(driver, timing=settings.timing, event_bus=bus)
        stats = orchestrator.run("old.example", "new.example")
    """

    def __init__(
        self,
        driver: SurfaceDriver,
        *,
        timing: TimingSettings | None = None,
        clock: Clock | None = None,
        event_bus: ProgressSink | None = None,
        confirm: ConfirmCallback | None = None,
        input_gate: InputGate | None = None,
        control: RunControl | None = None,
        on_transition: TransitionHook | None = None,
    ) -> None:
        self._driver = driver
        self._timing = timing if timing is not None else TimingSettings()
        self._clock = clock if clock is not None else DEFAULT_CLOCK
        self._events: ProgressSink = event_bus if event_bus is not None else EventBus()
        self._confirm = confirm
        self._input_gate: InputGate = input_gate if input_gate is not None else NullInputGate()
        self._control = control if control is not None else RunControl()
        self._matcher = RecordMatcher(driver)
        self._editor = EditorStateMachine(driver, timing=self._timing, clock=self._clock, on_transition=on_transition)
        self._ledger: OutcomeLedger | None = None

    @property
    def control(self) -> RunControl:
        return self._control

    # -- public operations -------------------------------------------------

    def start(self, expected_old: str, desired_new: str) -> RunStats | None:
        """Validate, ask for confirmation, then run.

        Returns:
            Sealed stats, or None when a run is already active or the
            confirmation was declined. Neither case changes any state.

        Raises:
            PreconditionError: If the pair is invalid.
            RunFailedError: If the run fails at run level.
        """
        old, new = validate_pair(expected_old, desired_new)
        if self._control.running:
            logger.warning("A run is already active, ignoring start request")
            return None
        if self._confirm is not None and not self._confirm(old, new):
            logger.info("Run not confirmed", expected_old=old, desired_new=new)
            return None
        if not self._control.try_acquire():
            logger.warning("A run is already active, ignoring start request")
            return None
        try:
            return self._execute(old, new)
        finally:
            self._control.release()

    def run(self, expected_old: str, desired_new: str) -> RunStats:
        """Run without asking for confirmation.

        Raises:
            PreconditionError: If the pair is invalid or a run is already active.
            RunFailedError: If the run fails at run level.
        """
        old, new = validate_pair(expected_old, desired_new)
        if not self._control.try_acquire():
            raise PreconditionError("A run is already active")
        try:
            return self._execute(old, new)
        finally:
            self._control.release()

    def stop(self) -> bool:
        """Request cancellation after the current record.

        Returns:
            False when no run is active.
        """
        requested = self._control.request_stop()
        if requested:
            logger.info("Stop requested")
        return requested

    def get_stats(self) -> RunStats | None:
        """Snapshot of the current run, or of the last one; None before any run."""
        if self._ledger is None:
            return None
        return self._ledger.snapshot()

    def preview(self, expected_old: str) -> PreviewResult:
        """Count the records a run would attempt, without opening any editor.

        Raises:
            PreconditionError: If expected_old is empty.
            ListingUnavailableError: If the listing cannot be read.
        """
        old = expected_old.strip()
        if not old:
            raise PreconditionError("The current value is required")
        return self._matcher.preview(self._driver.list_records(), old)

    # -- run loop ----------------------------------------------------------

    def _execute(self, old: str, new: str) -> RunStats:
        ledger = OutcomeLedger(old, new)
        self._ledger = ledger
        self._input_gate.set_enabled(False)
        structlog.contextvars.bind_contextvars(run_id=ledger.run_id)
        try:
            try:
                records = self._driver.list_records()
                ledger.set_total(len(records))
                logger.info("Run started", expected_old=old, desired_new=new, total=len(records))
                self._events.emit(RunStarted(run_id=ledger.run_id, expected_old=old, desired_new=new, total_count=len(records)))
                status = self._process_all(ledger, records, old, new)
            except Exception as e:
                stats = ledger.seal(RunStatus.FAILED, error=f"{type(e).__name__}: {e}")
                logger.error("Run failed", error=stats.error, processed=stats.processed_count, total=stats.total_count)
                self._events.emit(RunSummary.from_stats(stats))
                raise RunFailedError(stats, e) from e

            stats = ledger.seal(status)
            logger.info(
                "Run finished",
                status=stats.status.value,
                succeeded=stats.succeeded,
                failed=stats.failed,
                unconfirmed=stats.unconfirmed,
                skipped=stats.skipped,
                errored=stats.errored,
            )
            self._events.emit(RunSummary.from_stats(stats))
            return stats
        finally:
            self._input_gate.set_enabled(True)
            structlog.contextvars.unbind_contextvars("run_id")

    def _process_all(self, ledger: OutcomeLedger, records: Sequence[RecordRef], old: str, new: str) -> RunStatus:
        for position, record in enumerate(records):
            if self._control.stop_requested:
                logger.info("Run cancelled", unvisited=len(records) - position)
                return RunStatus.CANCELLED
            ledger.mark_visited()
            outcome = self._process_record(ledger, record, old, new)
            ledger.append(outcome)
            self._events.emit(RecordProcessed(outcome=outcome, stats=ledger.snapshot()))
            if not self._control.stop_requested:
                self._clock.sleep(self._timing.inter_record_delay)
        return RunStatus.COMPLETED

    def _process_record(self, ledger: OutcomeLedger, record: RecordRef, old: str, new: str) -> Outcome:
        with structlog.contextvars.bound_contextvars(record_index=record.index):
            try:
                decision = self._matcher.classify(record, old)
                if not decision.is_match:
                    reason = decision.skip_reason if decision.skip_reason is not None else SkipReason.NO_MATCH
                    logger.debug("Record skipped", observed=decision.record.observed_value, reason=reason.value)
                    return Skipped(index=record.index, observed_value=decision.record.observed_value, reason=reason)
                ledger.record_match()
                return self._editor.process(decision.record, expected_old=old, desired_new=new)
            except OrchestrationInvariantError:
                raise
            except Exception as e:
                logger.error("Record processing raised", error=f"{type(e).__name__}: {e}", exc_info=True)
                self._best_effort_close(record)
                return Error(index=record.index, message=f"{type(e).__name__}: {e}")

    def _best_effort_close(self, record: RecordRef) -> None:
        try:
            if self._driver.is_editor_open():
                self._driver.force_close_editor()
            if self._driver.is_menu_open(record):
                self._driver.close_action_menu(record)
        except Exception:
            logger.warning("Could not close the surface after a record error", exc_info=True)
