"""Surface driver plugin system: pluggy hookspecs and the driver manager."""

from retarget.plugins.hookspecs import PROJECT_NAME, DriverFactory, hookimpl, hookspec
from retarget.plugins.manager import DriverManager

__all__ = [
    "PROJECT_NAME",
    "DriverFactory",
    "DriverManager",
    "hookimpl",
    "hookspec",
]
