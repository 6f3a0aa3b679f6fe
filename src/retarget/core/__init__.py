"""Core infrastructure: configuration, logging, events, preferences."""

from retarget.core.config import (
    ExportSettings,
    PreferencesSettings,
    RetargetSettings,
    SurfaceSettings,
    TimingSettings,
    load_settings,
)
from retarget.core.events import EventBus, ProgressSink, RunEvent
from retarget.core.logging import configure_logging, get_logger
from retarget.core.preferences import LastUsedPair, PreferenceStore

__all__ = [
    "EventBus",
    "ExportSettings",
    "LastUsedPair",
    "PreferenceStore",
    "PreferencesSettings",
    "ProgressSink",
    "RetargetSettings",
    "RunEvent",
    "SurfaceSettings",
    "TimingSettings",
    "configure_logging",
    "get_logger",
    "load_settings",
]
