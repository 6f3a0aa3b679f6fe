# src/retarget/testing/chaossurface/surface.py
"""In-memory surface driver with fault injection.

SimulatedSurface models the parts of a record-management UI the engine
touches: a listing whose rows each carry a destination value, a per-row
action menu with an edit entry, and a modal editor with one mutable field
and a save control. It keeps two views of each value:

- the *listed* value, what the table shows
- the *live* value, what the server holds and the editor loads

They only differ when a record is configured as VALUE_DIVERGED (someone
else changed it after the table rendered). A committed save updates both.

Time-dependent behaviour (an editor that opens late) reads the injected
Clock, so with MockClock the whole run stays deterministic.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from retarget.contracts import (
    FieldResolver,
    InputNotification,
    ListingUnavailableError,
    RecordRef,
    SurfaceError,
)
from retarget.engine.clock import DEFAULT_CLOCK, Clock
from retarget.testing.chaossurface.config import ChaosSurfaceConfig, RecordFault
from retarget.testing.chaossurface.injection import FaultSelector

logger = structlog.get_logger(__name__)

PRIMARY_RESOLVER = "forward-host-input"
FALLBACK_RESOLVER = "first-text-input"


class SimulatedFaultError(SurfaceError):
    """Raised by the simulated surface for RAISE_ON_OPEN records."""


@dataclass(frozen=True, slots=True)
class SimulatedField:
    """Field handle returned by the simulated resolvers."""

    index: int
    resolved_by: str


@dataclass(slots=True)
class _Editor:
    index: int
    value: str
    dirty: bool = False


@dataclass(slots=True)
class SurfaceLog:
    """What the engine did to the surface, for assertions and rehearsal reports."""

    menu_opens: dict[int, int] = field(default_factory=dict)
    notifications: dict[int, tuple[InputNotification, ...]] = field(default_factory=dict)
    resolved_by: dict[int, str] = field(default_factory=dict)
    commits: list[tuple[int, str, str]] = field(default_factory=list)
    force_closes: int = 0
    saves: int = 0


class SimulatedSurface:
    """SurfaceDriver implementation backed by plain lists.

    Example:
        surface = SimulatedSurface.from_values(
            ["a.example", "b.example", "a.example"],
            faults={3: [RecordFault.SAVE_NEVER_CLOSES]},
        )
    """

    def __init__(self, config: ChaosSurfaceConfig, *, clock: Clock | None = None) -> None:
        self._config = config
        self._clock = clock if clock is not None else DEFAULT_CLOCK
        self._listed: list[str] = list(config.records)
        self._live: list[str] = list(config.records)
        self._selector = FaultSelector(seed=config.seed)
        self._faults: dict[int, frozenset[RecordFault]] = {}
        for position in range(1, len(config.records) + 1):
            scripted = set(config.faults.get(position, []))
            drawn = self._selector.select(config.rates.as_specs())
            if drawn is not None:
                scripted.add(drawn)
            self._faults[position] = frozenset(scripted)
            if RecordFault.VALUE_DIVERGED in scripted:
                self._live[position - 1] = config.diverged_value
        self._menu_open: int | None = None
        self._editor: _Editor | None = None
        self._pending: tuple[int, float] | None = None
        self.log = SurfaceLog()

    @classmethod
    def from_values(
        cls,
        values: Sequence[str],
        *,
        faults: dict[int, list[RecordFault]] | None = None,
        clock: Clock | None = None,
        **options: object,
    ) -> SimulatedSurface:
        """Build a surface listing ``values`` with optional scripted faults."""
        config = ChaosSurfaceConfig.model_validate({"records": list(values), "faults": faults or {}, **options})
        return cls(config, clock=clock)

    # -- inspection (not part of the driver protocol) ------------------------

    @property
    def config(self) -> ChaosSurfaceConfig:
        return self._config

    def faults_for(self, index: int) -> frozenset[RecordFault]:
        return self._faults.get(index, frozenset())

    def live_value(self, index: int) -> str:
        """Value the server holds for a record."""
        return self._live[index - 1]

    def listed_value(self, index: int) -> str:
        """Value the listing currently shows for a record."""
        return self._listed[index - 1]

    @property
    def live_values(self) -> list[str]:
        return list(self._live)

    # -- listing -------------------------------------------------------------

    def list_records(self) -> Sequence[RecordRef]:
        if self._config.listing_unavailable:
            raise ListingUnavailableError("Simulated listing table not found")
        return [RecordRef(index=position, row=position) for position in range(1, len(self._listed) + 1)]

    def read_listed_value(self, record: RecordRef) -> str | None:
        if self._has(record.index, RecordFault.LISTED_VALUE_UNREADABLE):
            return None
        return self._listed[record.index - 1].strip()

    # -- action menu -----------------------------------------------------------

    def open_action_menu(self, record: RecordRef) -> bool:
        if self._has(record.index, RecordFault.MENU_TOGGLE_MISSING):
            return False
        attempts = self.log.menu_opens.get(record.index, 0) + 1
        self.log.menu_opens[record.index] = attempts
        if self._has(record.index, RecordFault.MENU_NEVER_OPENS):
            return True
        if self._has(record.index, RecordFault.MENU_OPENS_ON_RETRY) and attempts == 1:
            return True
        self._menu_open = record.index
        return True

    def is_menu_open(self, record: RecordRef) -> bool:
        return self._menu_open == record.index

    def close_action_menu(self, record: RecordRef) -> None:
        if self._menu_open == record.index:
            self._menu_open = None

    # -- editor ------------------------------------------------------------------

    def invoke_edit(self, record: RecordRef) -> bool:
        if self._menu_open != record.index or self._has(record.index, RecordFault.EDIT_CONTROL_MISSING):
            return False
        if self._has(record.index, RecordFault.RAISE_ON_OPEN):
            raise SimulatedFaultError(f"Simulated failure opening the editor of record {record.index}")
        # Clicking a menu entry closes the menu
        self._menu_open = None
        if self._has(record.index, RecordFault.EDITOR_NEVER_OPENS):
            return True
        if self._has(record.index, RecordFault.EDITOR_OPENS_LATE):
            self._pending = (record.index, self._clock.monotonic() + self._config.editor_late_by)
            return True
        self._open_editor(record.index)
        return True

    def is_editor_open(self) -> bool:
        if self._pending is not None and self._clock.monotonic() >= self._pending[1]:
            index, _ = self._pending
            self._pending = None
            self._open_editor(index)
        return self._editor is not None

    def field_resolvers(self) -> Sequence[FieldResolver]:
        return [self._resolve_primary, self._resolve_fallback]

    def read_field(self, handle: SimulatedField) -> str:
        return self._require_editor(handle).value

    def set_field_and_notify(
        self,
        handle: SimulatedField,
        value: str,
        notifications: Sequence[InputNotification],
    ) -> None:
        editor = self._require_editor(handle)
        editor.value = ""
        editor.value = value
        editor.dirty = True
        self.log.notifications[handle.index] = tuple(notifications)

    def invoke_save(self) -> bool:
        editor = self._editor
        if editor is None or not editor.dirty or self._has(editor.index, RecordFault.SAVE_DISABLED):
            return False
        self.log.saves += 1
        if self._has(editor.index, RecordFault.SAVE_NEVER_CLOSES):
            return True
        self._commit(editor)
        if self._has(editor.index, RecordFault.SAVE_NEVER_CLOSES_COMMITTED):
            return True
        self._editor = None
        return True

    def force_close_editor(self) -> None:
        if self._editor is not None or self._pending is not None:
            self.log.force_closes += 1
        self._editor = None
        self._pending = None

    def close(self) -> None:
        """Nothing to release; the listing lives in memory."""
        pass

    # -- internals -------------------------------------------------------------

    def _has(self, index: int, fault: RecordFault) -> bool:
        return fault in self._faults.get(index, frozenset())

    def _open_editor(self, index: int) -> None:
        self._editor = _Editor(index=index, value=self._live[index - 1])

    def _resolve_primary(self) -> SimulatedField | None:
        editor = self._editor
        if editor is None or self._has(editor.index, RecordFault.FIELD_ONLY_FALLBACK):
            return None
        return self._resolved(editor.index, PRIMARY_RESOLVER)

    def _resolve_fallback(self) -> SimulatedField | None:
        editor = self._editor
        if editor is None:
            return None
        return self._resolved(editor.index, FALLBACK_RESOLVER)

    def _resolved(self, index: int, resolver: str) -> SimulatedField | None:
        if self._has(index, RecordFault.FIELD_MISSING):
            return None
        self.log.resolved_by[index] = resolver
        return SimulatedField(index=index, resolved_by=resolver)

    def _require_editor(self, handle: SimulatedField) -> _Editor:
        editor = self._editor
        if editor is None or editor.index != handle.index:
            raise SurfaceError(f"Field handle for record {handle.index} is stale: its editor is closed")
        return editor

    def _commit(self, editor: _Editor) -> None:
        old = self._live[editor.index - 1]
        self._live[editor.index - 1] = editor.value
        # The table re-renders after a save
        self._listed[editor.index - 1] = editor.value
        self.log.commits.append((editor.index, old, editor.value))
        logger.debug("Simulated commit", index=editor.index, old=old, new=editor.value)
