# tests/conftest.py
"""Shared test fixtures.

Most engine tests drive a SimulatedSurface with a MockClock: every bounded
wait and settle delay advances mock time instantly, so a run against a
surface that never answers still finishes in microseconds, and the default
production timings can be used unchanged.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from retarget.core.config import TimingSettings
from retarget.core.events import EventBus
from retarget.engine.clock import MockClock
from retarget.engine.orchestrator import Orchestrator
from retarget.testing.chaossurface import RecordFault, SimulatedSurface


class RecordingInputGate:
    """InputGate that remembers every toggle."""

    def __init__(self) -> None:
        self.calls: list[bool] = []

    def set_enabled(self, enabled: bool) -> None:
        self.calls.append(enabled)


class EventRecorder:
    """Subscribes to every given event type and keeps events in order."""

    def __init__(self, bus: EventBus, event_types: Sequence[type]) -> None:
        self.events: list[Any] = []
        for event_type in event_types:
            bus.subscribe(event_type, self.events.append)

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_type)]


@pytest.fixture
def clock() -> MockClock:
    return MockClock()


@pytest.fixture
def timing() -> TimingSettings:
    return TimingSettings()


@pytest.fixture
def make_surface(clock: MockClock) -> Callable[..., SimulatedSurface]:
    """Factory: make_surface(["a", "b"], faults={2: [RecordFault.SAVE_DISABLED]})."""

    def _make(values: Sequence[str], faults: dict[int, list[RecordFault]] | None = None, **options: Any) -> SimulatedSurface:
        return SimulatedSurface.from_values(values, faults=faults, clock=clock, **options)

    return _make


@pytest.fixture
def make_orchestrator(clock: MockClock, timing: TimingSettings) -> Callable[..., Orchestrator]:
    """Factory: make_orchestrator(surface, **overrides) with the mock clock."""

    def _make(surface: Any, **kwargs: Any) -> Orchestrator:
        kwargs.setdefault("timing", timing)
        kwargs.setdefault("clock", clock)
        return Orchestrator(surface, **kwargs)

    return _make


@pytest.fixture
def input_gate() -> RecordingInputGate:
    return RecordingInputGate()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(event_bus: EventBus) -> EventRecorder:
    """Records RunStarted, RecordProcessed and RunSummary from ``event_bus``."""
    from retarget.contracts import RecordProcessed, RunStarted, RunSummary

    return EventRecorder(event_bus, [RunStarted, RecordProcessed, RunSummary])


# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
