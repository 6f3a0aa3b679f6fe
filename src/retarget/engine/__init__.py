# src/retarget/engine/__init__.py
"""Retargeting engine: matching, per-record editing, and the run loop.

- Orchestrator: run lifecycle (validate, snapshot, iterate, seal)
- EditorStateMachine: one record from action menu to confirmed save
- RecordMatcher: listing-time classification
- OutcomeLedger: append-only outcomes and counters
- RunControl: run exclusivity and cooperative stop

Example:
    from retarget.engine import Orchestrator
    from retarget.testing.chaossurface import SimulatedSurface

    surface = SimulatedSurface.from_values(["a.example", "b.example", "a.example"])
    stats = Orchestrator(surface).run("a.example", "c.example")
"""

from retarget.engine.clock import DEFAULT_CLOCK, Clock, MockClock, SystemClock
from retarget.engine.control import RunControl, stop_on_signals
from retarget.engine.editor import EditorStateMachine, EditSession
from retarget.engine.editor_guard import EditorGuard
from retarget.engine.export import default_report_name, export_stats, render_json
from retarget.engine.ledger import OutcomeLedger
from retarget.engine.matcher import RecordMatcher
from retarget.engine.orchestrator import Orchestrator, validate_pair
from retarget.engine.waits import WaitResult, first_resolved, poll_until

__all__ = [
    "DEFAULT_CLOCK",
    "Clock",
    "EditSession",
    "EditorGuard",
    "EditorStateMachine",
    "MockClock",
    "Orchestrator",
    "OutcomeLedger",
    "RecordMatcher",
    "RunControl",
    "SystemClock",
    "WaitResult",
    "default_report_name",
    "export_stats",
    "first_resolved",
    "poll_until",
    "render_json",
    "stop_on_signals",
    "validate_pair",
]
