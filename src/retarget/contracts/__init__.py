"""Shared contracts: leaf module, imports nothing else from retarget.

Everything that crosses a subsystem boundary (engine, drivers, CLI) is
defined here so the engine and the drivers never import each other.
"""

from retarget.contracts.enums import (
    INPUT_NOTIFICATIONS,
    AbortReason,
    EditorPhase,
    ExportFormat,
    InputNotification,
    OutcomeKind,
    RunStatus,
    SkipReason,
)
from retarget.contracts.errors import (
    ListingUnavailableError,
    OrchestrationInvariantError,
    PreconditionError,
    RunFailedError,
    SurfaceCleanupError,
    SurfaceError,
    UnknownDriverError,
)
from retarget.contracts.events import (
    RecordProcessed,
    RunCompletionStatus,
    RunStarted,
    RunSummary,
)
from retarget.contracts.outcomes import Error, Failed, Outcome, RunStats, Skipped, Success
from retarget.contracts.records import MatchDecision, PreviewResult, RecordRef
from retarget.contracts.surface import (
    ConfirmCallback,
    FieldHandle,
    FieldResolver,
    InputGate,
    NullInputGate,
    SurfaceDriver,
)

__all__ = [
    "INPUT_NOTIFICATIONS",
    "AbortReason",
    "ConfirmCallback",
    "EditorPhase",
    "Error",
    "ExportFormat",
    "Failed",
    "FieldHandle",
    "FieldResolver",
    "InputGate",
    "InputNotification",
    "ListingUnavailableError",
    "MatchDecision",
    "NullInputGate",
    "OrchestrationInvariantError",
    "Outcome",
    "OutcomeKind",
    "PreconditionError",
    "PreviewResult",
    "RecordProcessed",
    "RecordRef",
    "RunCompletionStatus",
    "RunFailedError",
    "RunStarted",
    "RunStats",
    "RunStatus",
    "RunSummary",
    "SkipReason",
    "Skipped",
    "Success",
    "SurfaceCleanupError",
    "SurfaceDriver",
    "SurfaceError",
    "UnknownDriverError",
]
