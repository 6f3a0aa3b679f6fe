"""All status codes, phases, and reasons used across subsystem boundaries.

Values are stable strings: they appear in exported reports and JSON
output, so renaming a member is a report-format change.
"""

from enum import StrEnum


class RunStatus(StrEnum):
    """Status of a run as recorded in RunStats."""

    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class EditorPhase(StrEnum):
    """Phases of the per-record editor state machine.

    CONFIRMED and ABORTED are terminal.
    """

    CLOSED = "closed"
    OPENING_MENU = "opening_menu"
    MENU_OPEN = "menu_open"
    EDITOR_OPENING = "editor_opening"
    EDITOR_OPEN = "editor_open"
    VERIFYING = "verifying"
    MUTATING = "mutating"
    SAVING = "saving"
    CONFIRMED = "confirmed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (EditorPhase.CONFIRMED, EditorPhase.ABORTED)


class AbortReason(StrEnum):
    """Reason codes carried by Failed outcomes.

    SAVE_NO_CONFIRMATION is ambiguous: the commit may have succeeded on the
    server with only the close detection failing.
    """

    MENU_OPEN_FAILED = "menu-open-failed"
    EDIT_CONTROL_MISSING = "edit-control-missing"
    EDITOR_OPEN_TIMEOUT = "editor-open-timeout"
    FIELD_NOT_FOUND = "field-not-found"
    VALUE_MISMATCH = "value-mismatch"
    SAVE_CONTROL_UNAVAILABLE = "save-control-unavailable"
    SAVE_NO_CONFIRMATION = "save-no-confirmation"

    @property
    def is_ambiguous(self) -> bool:
        return self is AbortReason.SAVE_NO_CONFIRMATION


class SkipReason(StrEnum):
    """Why a listed record was not a candidate."""

    NO_MATCH = "no-match"
    FIELD_UNREADABLE = "field-unreadable"


class OutcomeKind(StrEnum):
    """Discriminator for the Outcome tagged union."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    ERROR = "error"


class InputNotification(StrEnum):
    """Input-lifecycle notifications synthesized after writing a field.

    Direct value assignment does not trigger the surface's own validation,
    so every member is dispatched, in declaration order, after each write.
    """

    VALUE_CHANGED = "input"
    CONTENT_CHANGED = "change"
    FOCUS_LOST = "blur"
    KEY_RELEASED = "keyup"


INPUT_NOTIFICATIONS: tuple[InputNotification, ...] = tuple(InputNotification)


class ExportFormat(StrEnum):
    """Report formats supported by the stats exporter."""

    JSON = "json"
    CSV = "csv"
