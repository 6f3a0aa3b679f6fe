# tests/unit/cli/conftest.py
"""CLI test fixtures.

The CLI callback configures logging against whatever stderr CliRunner
provides; reset it after each test so later tests don't log into a closed
stream.
"""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog
import yaml

# Fast but real timings: the CLI runs on the system clock
FAST_TIMING: dict[str, float] = {
    "poll_interval": 0.001,
    "menu_open_wait": 0.0,
    "menu_retry_wait": 0.0,
    "editor_open_timeout": 0.05,
    "editor_settle": 0.0,
    "field_lookup_timeout": 0.05,
    "mutate_settle": 0.0,
    "save_settle": 0.0,
    "save_confirm_timeout": 0.05,
    "post_save_settle": 0.0,
    "inter_record_delay": 0.0,
    "close_timeout": 0.05,
}


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(logging.WARNING)


@pytest.fixture
def write_settings(tmp_path: Path) -> Callable[..., Path]:
    """Factory: write_settings(["a.example"], faults={2: ["save_disabled"]}) -> settings path.

    Preferences are kept under tmp_path so tests never touch the real home.
    """

    def _write(records: list[str], faults: dict[int, list[str]] | None = None, **sections: Any) -> Path:
        options: dict[str, Any] = {"records": records}
        if faults:
            options["faults"] = {str(index): names for index, names in faults.items()}
        options.update(sections.pop("surface_options", {}))
        config: dict[str, Any] = {
            "timing": FAST_TIMING,
            "surface": {"driver": "simulated", "options": options},
            "preferences": {"path": str(tmp_path / "prefs" / "last-used.json")},
            "export": {"directory": str(tmp_path / "reports")},
        }
        config.update(sections)
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump(config))
        return path

    return _write
