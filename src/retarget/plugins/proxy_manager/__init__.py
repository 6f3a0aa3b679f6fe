# src/retarget/plugins/proxy_manager/__init__.py
"""Built-in driver for the reverse-proxy manager web UI (Playwright)."""

from retarget.plugins.proxy_manager.config import ProxyManagerOptions
from retarget.plugins.proxy_manager.plugin import DRIVER_NAME, ProxyManagerPlugin, create_proxy_manager_surface
from retarget.plugins.proxy_manager.surface import ProxyManagerError, ProxyManagerSurface

__all__ = [
    "DRIVER_NAME",
    "ProxyManagerError",
    "ProxyManagerOptions",
    "ProxyManagerPlugin",
    "ProxyManagerSurface",
    "create_proxy_manager_surface",
]
