# src/retarget/plugins/proxy_manager/plugin.py
"""Registers the Playwright-backed manager UI driver as ``proxy-manager``."""

from __future__ import annotations

from typing import Any

from retarget.engine.clock import Clock
from retarget.plugins.hookspecs import DriverFactory, hookimpl
from retarget.plugins.proxy_manager.config import ProxyManagerOptions
from retarget.plugins.proxy_manager.surface import ProxyManagerSurface

DRIVER_NAME = "proxy-manager"


def create_proxy_manager_surface(options: dict[str, Any], clock: Clock) -> ProxyManagerSurface:
    """Validate ``surface.options`` and open the manager UI in a browser.

    The engine owns every wait, so the clock is not needed here.

    Raises:
        pydantic.ValidationError: If the options are invalid (before any browser starts)
        ProxyManagerError: If the browser or the page cannot be opened
    """
    return ProxyManagerSurface.launch(ProxyManagerOptions.model_validate(options))


class ProxyManagerPlugin:
    """pluggy plugin object providing the ``proxy-manager`` driver."""

    @hookimpl
    def retarget_get_surface_drivers(self) -> dict[str, DriverFactory]:
        return {DRIVER_NAME: create_proxy_manager_surface}
