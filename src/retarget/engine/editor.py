# src/retarget/engine/editor.py
"""Editor state machine: drives one matched record to a terminal outcome.

Phases::

    closed -> opening_menu -> menu_open -> editor_opening -> editor_open
           -> verifying -> mutating -> saving -> confirmed
    (any non-terminal phase) -> aborted

The listing snapshot the record was matched against can be stale by the time
its editor opens (another operator edited it, the table re-rendered late),
so the field is re-read inside the editor and compared to the expected value
before anything is written: match optimistically, commit pessimistically.

Commit has no explicit success signal. The editor closing is the surface's
acknowledgment; if it never closes the outcome is SAVE_NO_CONFIRMATION,
which is ambiguous (the server may have applied the change) and is reported
separately from definite failures.

The EditorGuard wrapping each record closes editor and menu whichever phase
the machine stopped in; if they will not close, the decided outcome is kept
and the leftover surface is logged.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog
from tenacity import Retrying, retry_if_result, stop_after_attempt, wait_none

from retarget.contracts import (
    INPUT_NOTIFICATIONS,
    AbortReason,
    EditorPhase,
    Failed,
    FieldHandle,
    OrchestrationInvariantError,
    RecordRef,
    Success,
    SurfaceCleanupError,
    SurfaceDriver,
)
from retarget.core.config import TimingSettings
from retarget.engine.clock import DEFAULT_CLOCK, Clock
from retarget.engine.editor_guard import EditorGuard
from retarget.engine.waits import first_resolved, poll_until

logger = structlog.get_logger(__name__)

TransitionHook = Callable[[int, EditorPhase, EditorPhase], None]
"""Called as hook(record_index, from_phase, to_phase) on every transition."""

_TRANSITIONS: dict[EditorPhase, frozenset[EditorPhase]] = {
    EditorPhase.CLOSED: frozenset({EditorPhase.OPENING_MENU}),
    EditorPhase.OPENING_MENU: frozenset({EditorPhase.MENU_OPEN, EditorPhase.ABORTED}),
    EditorPhase.MENU_OPEN: frozenset({EditorPhase.EDITOR_OPENING, EditorPhase.ABORTED}),
    EditorPhase.EDITOR_OPENING: frozenset({EditorPhase.EDITOR_OPEN, EditorPhase.ABORTED}),
    EditorPhase.EDITOR_OPEN: frozenset({EditorPhase.VERIFYING, EditorPhase.ABORTED}),
    EditorPhase.VERIFYING: frozenset({EditorPhase.MUTATING, EditorPhase.ABORTED}),
    EditorPhase.MUTATING: frozenset({EditorPhase.SAVING, EditorPhase.ABORTED}),
    EditorPhase.SAVING: frozenset({EditorPhase.CONFIRMED, EditorPhase.ABORTED}),
    EditorPhase.CONFIRMED: frozenset(),
    EditorPhase.ABORTED: frozenset(),
}


@dataclass
class EditSession:
    """Mutable state of one record's trip through the state machine.

    Owned by a single EditorStateMachine.process() call and discarded when it
    returns.
    """

    record: RecordRef
    expected_old: str
    desired_new: str
    verified_value: str | None = None
    phase: EditorPhase = EditorPhase.CLOSED
    outcome: Success | Failed | None = None
    history: list[EditorPhase] = field(default_factory=lambda: [EditorPhase.CLOSED])


class EditorStateMachine:
    """Drives matched records through open -> verify -> mutate -> save -> confirm.

    Example:
        machine = EditorStateMachine(driver, timing=settings.timing)
        outcome = machine.process(record, expected_old="a.example", desired_new="c.example")
    """

    def __init__(
        self,
        driver: SurfaceDriver,
        *,
        timing: TimingSettings | None = None,
        clock: Clock | None = None,
        on_transition: TransitionHook | None = None,
    ) -> None:
        self._driver = driver
        self._timing = timing if timing is not None else TimingSettings()
        self._clock = clock if clock is not None else DEFAULT_CLOCK
        self._on_transition = on_transition

    def process(self, record: RecordRef, *, expected_old: str, desired_new: str) -> Success | Failed:
        """Drive one record to CONFIRMED or ABORTED.

        A surface that refuses to close after the outcome is decided is
        logged and the outcome stands: a confirmed save stays a Success and
        an unconfirmed one stays SAVE_NO_CONFIRMATION.

        Returns:
            Success when the save was confirmed, Failed on any abort.

        Raises:
            Exception: Anything the driver raises propagates; the guard still
                tries to close the surface first.
        """
        session = EditSession(record=record, expected_old=expected_old, desired_new=desired_new)
        try:
            with EditorGuard(
                self._driver,
                record,
                clock=self._clock,
                close_timeout=self._timing.close_timeout,
                poll_interval=self._timing.poll_interval,
            ):
                outcome = self._drive(session)
        except SurfaceCleanupError as e:
            if session.outcome is None:
                raise
            logger.warning(
                "Surface left open after the record was decided",
                record_index=record.index,
                phase=session.phase.value,
                editor_open=e.editor_open,
                menu_open=e.menu_open,
            )
            return session.outcome
        return outcome

    # -- phases ------------------------------------------------------------

    def _drive(self, session: EditSession) -> Success | Failed:
        driver = self._driver
        timing = self._timing
        record = session.record

        self._advance(session, EditorPhase.OPENING_MENU)
        if not self._open_menu(record):
            return self._abort(session, AbortReason.MENU_OPEN_FAILED)
        self._advance(session, EditorPhase.MENU_OPEN)

        if not driver.invoke_edit(record):
            return self._abort(session, AbortReason.EDIT_CONTROL_MISSING)
        self._advance(session, EditorPhase.EDITOR_OPENING)

        if not self._wait(driver.is_editor_open, timing.editor_open_timeout):
            # A late editor must not open during the next record
            driver.force_close_editor()
            return self._abort(session, AbortReason.EDITOR_OPEN_TIMEOUT)
        self._advance(session, EditorPhase.EDITOR_OPEN)
        self._clock.sleep(timing.editor_settle)

        handle = self._locate_field()
        if handle is None:
            return self._abort(session, AbortReason.FIELD_NOT_FOUND)
        self._advance(session, EditorPhase.VERIFYING)

        session.verified_value = driver.read_field(handle)
        if session.verified_value != session.expected_old:
            return self._abort(session, AbortReason.VALUE_MISMATCH, observed_value=session.verified_value)
        self._advance(session, EditorPhase.MUTATING)

        driver.set_field_and_notify(handle, session.desired_new, INPUT_NOTIFICATIONS)
        self._clock.sleep(timing.mutate_settle)
        self._clock.sleep(timing.save_settle)
        if not driver.invoke_save():
            return self._abort(session, AbortReason.SAVE_CONTROL_UNAVAILABLE)
        self._advance(session, EditorPhase.SAVING)

        if not self._wait(lambda: not driver.is_editor_open(), timing.save_confirm_timeout):
            driver.force_close_editor()
            return self._abort(session, AbortReason.SAVE_NO_CONFIRMATION)
        self._advance(session, EditorPhase.CONFIRMED)

        session.outcome = Success(index=record.index, old_value=session.expected_old, new_value=session.desired_new)
        logger.info("Record updated", index=record.index, old=session.expected_old, new=session.desired_new)
        self._clock.sleep(timing.post_save_settle)
        return session.outcome

    def _open_menu(self, record: RecordRef) -> bool:
        """Open the action menu, retrying once with the longer wait."""
        waits = iter((self._timing.menu_open_wait, self._timing.menu_retry_wait))

        def attempt() -> bool:
            return self._trigger_menu(record, next(waits))

        retrying = Retrying(
            stop=stop_after_attempt(2),
            wait=wait_none(),
            retry=retry_if_result(lambda opened: opened is False),
            retry_error_callback=lambda retry_state: False,
            before_sleep=lambda retry_state: logger.info("Action menu did not open, retrying", index=record.index),
            sleep=self._clock.sleep,
        )
        opened: bool = retrying(attempt)
        return opened

    def _trigger_menu(self, record: RecordRef, wait: float) -> bool:
        if not self._driver.open_action_menu(record):
            return False
        return self._wait(lambda: self._driver.is_menu_open(record), wait)

    def _locate_field(self) -> FieldHandle | None:
        """Poll the resolver chain until one strategy yields a handle."""
        resolvers = self._driver.field_resolvers()
        found: list[FieldHandle] = []

        def field_found() -> bool:
            handle = first_resolved(resolvers)
            if handle is None:
                return False
            found.append(handle)
            return True

        self._wait(field_found, self._timing.field_lookup_timeout)
        return found[0] if found else None

    # -- helpers -----------------------------------------------------------

    def _wait(self, condition: Callable[[], bool], timeout: float) -> bool:
        result = poll_until(condition, timeout=timeout, interval=self._timing.poll_interval, clock=self._clock)
        return result.satisfied

    def _advance(self, session: EditSession, to: EditorPhase) -> None:
        if to not in _TRANSITIONS[session.phase]:
            raise OrchestrationInvariantError(f"Record {session.record.index}: illegal editor transition {session.phase} -> {to}")
        from_phase = session.phase
        session.phase = to
        session.history.append(to)
        logger.debug("Editor transition", index=session.record.index, from_phase=from_phase.value, to_phase=to.value)
        if self._on_transition is not None:
            self._on_transition(session.record.index, from_phase, to)

    def _abort(self, session: EditSession, reason: AbortReason, *, observed_value: str | None = None) -> Failed:
        self._advance(session, EditorPhase.ABORTED)
        session.outcome = Failed(index=session.record.index, reason=reason, observed_value=observed_value)
        logger.warning(
            "Record aborted",
            index=session.record.index,
            reason=reason.value,
            observed=observed_value,
            ambiguous=reason.is_ambiguous,
        )
        return session.outcome
