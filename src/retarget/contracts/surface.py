# src/retarget/contracts/surface.py
"""Surface driver protocol and presentation collaborator contracts.

The engine never touches the management interface except through the
primitives below. Drivers are expected to return promptly: every wait for
the surface to reach an observable state (menu open, editor open or closed)
is done by the engine, polling the ``is_*_open`` checks with a bounded
timeout.

Field lookup is a prioritized chain: ``field_resolvers()`` returns resolver
functions in preference order and the engine tries each until one yields a
handle.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol

from retarget.contracts.enums import InputNotification
from retarget.contracts.records import RecordRef

FieldHandle = Any
"""Opaque handle to the mutable field inside an open editor."""

FieldResolver = Callable[[], FieldHandle | None]
"""One lookup strategy: returns a handle, or None when it finds nothing."""

ConfirmCallback = Callable[[str, str], bool]
"""Human confirmation of an (old, new) pair before any record is touched."""


class SurfaceDriver(Protocol):
    """Core-facing contract with the interactive surface.

    Implementations:
    - ProxyManagerSurface: the manager web UI through Playwright
      (retarget.plugins.proxy_manager)
    - SimulatedSurface: in-memory surface with fault injection
      (retarget.testing.chaossurface)
    - third-party drivers registered through the ``retarget`` entry point
      group (see retarget.plugins.hookspecs)
    """

    def list_records(self) -> Sequence[RecordRef]:
        """Snapshot the listing. Not live: later re-renders are not reflected.

        Raises:
            ListingUnavailableError: If the listing cannot be read at all.
        """
        ...

    def read_listed_value(self, record: RecordRef) -> str | None:
        """Read the destination cell of a listed row, trimmed.

        Returns:
            The rendered value, or None when the cell cannot be located.
        """
        ...

    def open_action_menu(self, record: RecordRef) -> bool:
        """Trigger the row's action menu.

        Returns:
            False when the menu toggle itself is absent.
        """
        ...

    def is_menu_open(self, record: RecordRef) -> bool:
        """Check whether the row's action menu is observably open."""
        ...

    def close_action_menu(self, record: RecordRef) -> None:
        """Close the row's action menu if it is open."""
        ...

    def invoke_edit(self, record: RecordRef) -> bool:
        """Invoke the edit action from the open menu.

        Returns:
            False when the edit control is absent. True only means the
            editor-open attempt was initiated.
        """
        ...

    def is_editor_open(self) -> bool:
        """Check whether an editor surface is observably open."""
        ...

    def field_resolvers(self) -> Sequence[FieldResolver]:
        """Ordered lookup strategies for the mutable field in the open editor."""
        ...

    def read_field(self, handle: FieldHandle) -> str:
        """Read the live value of a located field."""
        ...

    def set_field_and_notify(
        self,
        handle: FieldHandle,
        value: str,
        notifications: Sequence[InputNotification],
    ) -> None:
        """Clear the field, write ``value``, then dispatch each notification in order."""
        ...

    def invoke_save(self) -> bool:
        """Invoke the editor's commit control.

        Returns:
            False when the control is absent or disabled.
        """
        ...

    def force_close_editor(self) -> None:
        """Close the editor without saving, trying every close path the surface offers."""
        ...

    def close(self) -> None:
        """Release whatever the driver holds (browser, session). Called once, after the run."""
        ...


class InputGate(Protocol):
    """Presentation inputs that must be disabled while a run is active."""

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable the (old, new) inputs."""
        ...


class NullInputGate:
    """Input gate for front ends without editable inputs (CLI, library use)."""

    def set_enabled(self, enabled: bool) -> None:
        """No inputs to toggle."""
        pass
