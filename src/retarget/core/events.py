"""Run progress dispatch.

The orchestrator emits three kinds of event (RunStarted, RecordProcessed,
RunSummary) and never knows who is listening. Front ends hand the bus a
table of handlers keyed by event class, which is exactly what the formatter
factories in cli_formatters return.
"""

from collections import defaultdict
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from retarget.contracts import RecordProcessed, RunStarted, RunSummary

RunEvent = RunStarted | RecordProcessed | RunSummary

HandlerTable = Mapping[type, Callable[[Any], None]]
"""Event class -> handler, as built by the formatter factories."""


class ProgressSink(Protocol):
    """What the orchestrator needs from a progress consumer."""

    def emit(self, event: RunEvent) -> None: ...


class EventBus:
    """Synchronous fan-out of run events, matched on the exact event class.

    Handlers run on the emitting thread in the order they were added; an
    exception in one propagates to the orchestrator.

    Example:
        bus = EventBus(create_console_formatters())
        orchestrator = Orchestrator(driver, event_bus=bus)
    """

    def __init__(self, handlers: HandlerTable | None = None) -> None:
        self._handlers: defaultdict[type, list[Callable[[Any], None]]] = defaultdict(list)
        if handlers:
            self.subscribe_all(handlers)

    def subscribe(self, event_type: type, handler: Callable[[Any], None]) -> None:
        self._handlers[event_type].append(handler)

    def subscribe_all(self, handlers: HandlerTable) -> None:
        for event_type, handler in handlers.items():
            self.subscribe(event_type, handler)

    def emit(self, event: RunEvent) -> None:
        for handler in self._handlers.get(type(event), ()):
            handler(event)
