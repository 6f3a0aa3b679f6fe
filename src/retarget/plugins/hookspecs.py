# src/retarget/plugins/hookspecs.py
"""pluggy hook specifications for surface driver plugins.

Plugins implement these hooks to make a surface driver selectable by name
from settings (``surface.driver``). The driver manager calls them during
discovery.

Usage (implementing a plugin):
    from retarget.plugins.hookspecs import hookimpl

    class MyDriverPlugin:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def retarget_get_surface_drivers(self):
            return {"my-proxy": create_my_driver}

Third-party packages expose such a plugin object through the ``retarget``
entry point group.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from retarget.contracts.surface import SurfaceDriver
    from retarget.engine.clock import Clock

# Project name for pluggy (also the entry point group)
PROJECT_NAME = "retarget"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)

DriverFactory = Callable[[dict[str, Any], "Clock"], "SurfaceDriver"]
"""Builds a driver from ``surface.options`` and the run clock."""


class RetargetSurfaceSpec:
    """Hook specifications for surface driver plugins."""

    @hookspec
    def retarget_get_surface_drivers(self) -> dict[str, DriverFactory]:  # type: ignore[empty-body]
        """Return driver factories keyed by driver name.

        Returns:
            Mapping of driver name to factory callable
        """
