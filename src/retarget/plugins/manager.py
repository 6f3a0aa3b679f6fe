# src/retarget/plugins/manager.py
"""Driver manager for surface driver discovery and construction.

Uses pluggy for hook-based registration.
"""

from __future__ import annotations

from typing import Any

import pluggy

from retarget.contracts import SurfaceDriver, UnknownDriverError
from retarget.core.config import SurfaceSettings
from retarget.engine.clock import DEFAULT_CLOCK, Clock
from retarget.plugins.hookspecs import PROJECT_NAME, DriverFactory, RetargetSurfaceSpec


class DriverManager:
    """Manages surface driver discovery, registration, and lookup.

    Usage:
        manager = DriverManager()
        manager.register_builtin_plugins()
        driver = manager.create_driver(settings.surface)
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(RetargetSurfaceSpec)
        self._factories: dict[str, DriverFactory] = {}

    def register_builtin_plugins(self) -> None:
        """Register the drivers shipped with retarget.

        ``proxy-manager`` drives the real manager UI through a browser;
        ``simulated`` is the in-memory surface for rehearsals and tests.
        """
        from retarget.plugins.proxy_manager.plugin import ProxyManagerPlugin
        from retarget.testing.chaossurface.plugin import ChaosSurfacePlugin

        self.register(ProxyManagerPlugin())
        self.register(ChaosSurfacePlugin())

    def load_entrypoint_plugins(self) -> int:
        """Register third-party drivers from the ``retarget`` entry point group.

        Returns:
            Number of plugins loaded
        """
        count = self._pm.load_setuptools_entrypoints(PROJECT_NAME)
        self._refresh_factories()
        return count

    def register(self, plugin: Any) -> None:
        """Register a plugin object implementing retarget_get_surface_drivers.

        Raises:
            ValueError: If it registers a driver name that is already taken
        """
        self._pm.register(plugin)
        try:
            self._refresh_factories()
        except ValueError:
            self._pm.unregister(plugin)
            raise

    def _refresh_factories(self) -> None:
        factories: dict[str, DriverFactory] = {}
        for provided in self._pm.hook.retarget_get_surface_drivers():
            for name, factory in provided.items():
                if name in factories:
                    raise ValueError(f"Duplicate surface driver name: '{name}'")
                factories[name] = factory
        self._factories = factories

    @property
    def available(self) -> list[str]:
        """Registered driver names, sorted."""
        return sorted(self._factories)

    def create_driver(self, settings: SurfaceSettings, clock: Clock | None = None) -> SurfaceDriver:
        """Build the driver named by ``settings.driver``.

        Raises:
            UnknownDriverError: If no plugin registered that name
        """
        factory = self._factories.get(settings.driver)
        if factory is None:
            raise UnknownDriverError(settings.driver, self.available)
        return factory(dict(settings.options), clock if clock is not None else DEFAULT_CLOCK)
