# src/retarget/core/config.py
"""
Configuration schema and loading for retarget.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Every wait and settle delay is expressed in seconds. Defaults reproduce the
timings the tool was tuned with against the reverse-proxy manager UI.
"""

import os
import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, model_validator

from retarget.contracts.enums import ExportFormat


class TimingSettings(BaseModel):
    """Bounded waits and settle delays for the editor state machine.

    Waits are per-wait, not per-run: a slow surface extends a run instead of
    failing it, except where a wait's timeout is itself an abort reason.
    """

    model_config = {"frozen": True}

    poll_interval: float = Field(default=0.1, gt=0, description="Interval between surface checks")
    menu_open_wait: float = Field(default=0.3, ge=0, description="First wait for the action menu to open")
    menu_retry_wait: float = Field(default=0.5, ge=0, description="Wait after re-triggering the action menu")
    editor_open_timeout: float = Field(default=2.0, gt=0, description="Wait for the editor to appear")
    editor_settle: float = Field(default=0.5, ge=0, description="Delay after the editor appears, before field lookup")
    field_lookup_timeout: float = Field(default=2.0, ge=0, description="Wait for any field resolver to succeed")
    mutate_settle: float = Field(default=0.1, ge=0, description="Delay after writing the field")
    save_settle: float = Field(default=0.3, ge=0, description="Delay before invoking save")
    save_confirm_timeout: float = Field(default=5.0, gt=0, description="Wait for the editor to close after save")
    post_save_settle: float = Field(default=1.5, ge=0, description="Delay after a confirmed save for server processing")
    inter_record_delay: float = Field(default=0.3, ge=0, description="Delay after each visited record")
    close_timeout: float = Field(default=0.3, ge=0, description="Wait for a forced editor or menu close to take effect")

    @model_validator(mode="after")
    def validate_retry_wait(self) -> "TimingSettings":
        """The menu retry exists to give a slow surface more time, never less."""
        if self.menu_retry_wait < self.menu_open_wait:
            raise ValueError(f"menu_retry_wait ({self.menu_retry_wait}) must be >= menu_open_wait ({self.menu_open_wait})")
        return self


class SurfaceSettings(BaseModel):
    """Which surface driver to use and its driver-specific options.

    Example YAML:
        surface:
          driver: proxy-manager
          options:
            url: http://proxy.internal:81/nginx/redirection
            storage_state: ~/.config/retarget/session.json
    """

    model_config = {"frozen": True}

    driver: str = Field(default="proxy-manager", min_length=1, description="Registered surface driver name")
    options: dict[str, Any] = Field(default_factory=dict, description="Options passed to the driver factory")


class PreferencesSettings(BaseModel):
    """Persistence of the last-used (old, new) pair across sessions."""

    model_config = {"frozen": True}

    enabled: bool = Field(default=True, description="Read and write the last-used pair")
    path: Path = Field(
        default=Path("~/.config/retarget/last-used.json"),
        description="JSON file holding the last-used pair",
    )


class ExportSettings(BaseModel):
    """Report export defaults."""

    model_config = {"frozen": True}

    directory: Path = Field(default=Path("."), description="Directory for generated report files")
    format: ExportFormat = Field(default=ExportFormat.JSON, description="Report format: json or csv")


class RetargetSettings(BaseModel):
    """Top-level retarget configuration.

    All sections have defaults except the driver options: the default
    ``proxy-manager`` driver needs at least ``surface.options.url``.
    """

    model_config = {"frozen": True}

    timing: TimingSettings = Field(default_factory=TimingSettings, description="Waits and settle delays")
    surface: SurfaceSettings = Field(default_factory=SurfaceSettings, description="Surface driver selection")
    preferences: PreferencesSettings = Field(default_factory=PreferencesSettings, description="Last-used pair persistence")
    export: ExportSettings = Field(default_factory=ExportSettings, description="Report export defaults")


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            env_value = os.environ.get(match.group(1))
            if env_value is not None:
                return env_value
            default = match.group(2)
            if default is not None:
                return default
            # Unresolved: keep the literal so validation reports it
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def _lower_keys(value: Any) -> Any:
    """Lowercase mapping keys recursively.

    Dynaconf keeps the case of nested keys as written in environment
    variables (RETARGET_TIMING__POLL_INTERVAL yields POLL_INTERVAL).
    """
    if isinstance(value, dict):
        return {(k.lower() if isinstance(k, str) else k): _lower_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_lower_keys(item) for item in value]
    return value


def load_settings(config_path: Path | None = None) -> RetargetSettings:
    """Load settings from a YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (RETARGET_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Environment variable format: RETARGET_TIMING__EDITOR_OPEN_TIMEOUT=3.

    Args:
        config_path: Path to YAML configuration file, or None for
            environment and defaults only.

    Returns:
        Validated RetargetSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config_path is given but doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="RETARGET",
        settings_files=[str(config_path)] if config_path is not None else [],
        environments=False,
        load_dotenv=False,  # the CLI loads .env itself, before this runs
        merge_enabled=True,
    )

    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _lower_keys(raw_config)
    raw_config = _expand_env_vars(raw_config)

    return RetargetSettings(**raw_config)
