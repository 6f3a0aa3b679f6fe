# src/retarget/testing/chaossurface/__init__.py
"""Simulated surface driver with fault injection.

Lets the engine be rehearsed end to end, and tested deterministically,
without a browser or a live management UI.

Example:
    from retarget.testing.chaossurface import RecordFault, SimulatedSurface

    surface = SimulatedSurface.from_values(
        ["a.example", "a.example"],
        faults={2: [RecordFault.VALUE_DIVERGED]},
    )
"""

from retarget.testing.chaossurface.config import (
    ChaosSurfaceConfig,
    FaultRatesConfig,
    RecordFault,
    list_presets,
    load_config,
    load_preset,
)
from retarget.testing.chaossurface.injection import FaultSelector
from retarget.testing.chaossurface.plugin import ChaosSurfacePlugin, create_simulated_surface
from retarget.testing.chaossurface.surface import (
    FALLBACK_RESOLVER,
    PRIMARY_RESOLVER,
    SimulatedField,
    SimulatedFaultError,
    SimulatedSurface,
    SurfaceLog,
)

__all__ = [
    "FALLBACK_RESOLVER",
    "PRIMARY_RESOLVER",
    "ChaosSurfaceConfig",
    "ChaosSurfacePlugin",
    "FaultRatesConfig",
    "FaultSelector",
    "RecordFault",
    "SimulatedFaultError",
    "SimulatedField",
    "SimulatedSurface",
    "SurfaceLog",
    "create_simulated_surface",
    "list_presets",
    "load_config",
    "load_preset",
]
