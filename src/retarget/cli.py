# src/retarget/cli.py
"""retarget Command Line Interface.

Entry point for the retarget CLI tool.

Exit codes for ``run``:
    0  every matching record updated (or nothing matched)
    1  partial: some records failed, were unconfirmed, or raised
    2  run failure, or invalid settings / values
    3  cancelled (interrupted, or confirmation declined)
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Literal

import typer
from pydantic import ValidationError

from retarget import __version__
from retarget.contracts import (
    ExportFormat,
    PreconditionError,
    RunFailedError,
    RunStats,
    RunSummary,
    SurfaceDriver,
    SurfaceError,
    UnknownDriverError,
)
from retarget.core.config import RetargetSettings, load_settings
from retarget.core.preferences import LastUsedPair, PreferenceStore
from retarget.testing.chaossurface.cli import app as chaossurface_app

if TYPE_CHECKING:
    from retarget.plugins.manager import DriverManager

__all__ = [
    "app",
]

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_FAILED = 2
EXIT_CANCELLED = 3

# Module-level singleton for the driver manager
_driver_manager_cache: DriverManager | None = None


def _get_driver_manager() -> DriverManager:
    """Get initialized driver manager (singleton).

    Returns:
        DriverManager with built-in and entry point drivers registered
    """
    global _driver_manager_cache

    from retarget.plugins.manager import DriverManager

    if _driver_manager_cache is None:
        manager = DriverManager()
        manager.register_builtin_plugins()
        manager.load_entrypoint_plugins()
        _driver_manager_cache = manager
    return _driver_manager_cache


app = typer.Typer(
    name="retarget",
    help="retarget: bulk conditional rewrite of record destinations through a management UI.",
    no_args_is_help=True,
)

app.add_typer(chaossurface_app, name="chaossurface", help="Simulated surface commands.")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"retarget version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(EXIT_FAILED)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)  # Don't override existing env vars


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # We handle existence check ourselves for better error message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs on stderr (for machine processing).",
    ),
) -> None:
    """retarget: bulk conditional rewrite of record destinations through a management UI."""
    from retarget.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(json_output=json_logs, level=log_level)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load_settings_or_exit(settings: Path | None) -> RetargetSettings:
    """Load settings, turning configuration problems into exit code 2."""
    settings_path = settings.expanduser() if settings is not None else None
    try:
        return load_settings(settings_path)
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(EXIT_FAILED) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(EXIT_FAILED) from None


def _create_driver_or_exit(config: RetargetSettings) -> SurfaceDriver:
    try:
        return _get_driver_manager().create_driver(config.surface)
    except UnknownDriverError as e:
        typer.echo(f"Error: {e.args[0]}", err=True)
        raise typer.Exit(EXIT_FAILED) from None
    except (ValidationError, ValueError, FileNotFoundError, SurfaceError) as e:
        typer.echo(f"Error configuring surface driver '{config.surface.driver}': {e}", err=True)
        raise typer.Exit(EXIT_FAILED) from None


def _resolve_value(given: str | None, remembered: str, prompt: str) -> str:
    """Use the CLI value, else the remembered one, else ask."""
    if given is not None:
        return given
    if remembered:
        return remembered
    value: str = typer.prompt(prompt, err=True)
    return value


def _export_or_warn(stats: RunStats, destination: Path, fmt: ExportFormat, *, into_directory: bool = False) -> None:
    from retarget.engine.export import export_stats

    destination = destination.expanduser()
    try:
        if into_directory:
            destination.mkdir(parents=True, exist_ok=True)
        path = export_stats(stats, destination, fmt)
    except OSError as e:
        typer.echo(f"Warning: could not write report to {destination}: {e}", err=True)
        return
    typer.echo(f"Report written to {path}", err=True)


@app.command()
def run(
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    old: str | None = typer.Option(
        None,
        "--old",
        help="Current destination value to match (defaults to the last one used).",
    ),
    new: str | None = typer.Option(
        None,
        "--new",
        help="Destination value to write (defaults to the last one used).",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip the confirmation prompt.",
    ),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' (human-readable) or 'json' (one JSON object per line).",
    ),
    show_skipped: bool = typer.Option(
        False,
        "--show-skipped",
        help="Also list records that did not match (console format).",
    ),
    export: Path | None = typer.Option(
        None,
        "--export",
        "-e",
        help="Write a report to this file, or into this directory under a generated name.",
    ),
    report: bool = typer.Option(
        False,
        "--report",
        help="Write a report into export.directory from settings under a generated name.",
    ),
    export_format: ExportFormat | None = typer.Option(
        None,
        "--export-format",
        help="Report format (defaults to export.format from settings).",
    ),
) -> None:
    """Rewrite every listed record whose destination equals --old to --new.

    Each matching record is re-checked inside its editor before it is
    changed. Ctrl-C stops after the record in progress.
    """
    from retarget.cli_formatters import create_console_formatters, create_json_formatters
    from retarget.core.events import EventBus
    from retarget.engine.control import RunControl, stop_on_signals
    from retarget.engine.orchestrator import Orchestrator, validate_pair

    config = _load_settings_or_exit(settings)

    store = PreferenceStore(config.preferences.path) if config.preferences.enabled else None
    remembered = store.load() if store is not None else LastUsedPair()
    old_value = _resolve_value(old, remembered.old_value, "Current destination")
    new_value = _resolve_value(new, remembered.new_value, "New destination")

    try:
        old_value, new_value = validate_pair(old_value, new_value)
    except PreconditionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_FAILED) from None

    if store is not None and (old is not None or new is not None):
        if not store.save(LastUsedPair(old_value=old_value, new_value=new_value)):
            typer.echo(f"Warning: could not remember these values in {store.path}", err=True)

    def _write_report(stats: RunStats) -> None:
        fmt = export_format or config.export.format
        if export is not None:
            _export_or_warn(stats, export, fmt)
        elif report:
            _export_or_warn(stats, config.export.directory, fmt, into_directory=True)

    driver = _create_driver_or_exit(config)

    formatters = create_json_formatters() if output_format == "json" else create_console_formatters(show_skipped=show_skipped)
    event_bus = EventBus(formatters)

    def _confirm(expected_old: str, desired_new: str) -> bool:
        return typer.confirm(f"Replace {expected_old!r} with {desired_new!r} in every matching record?", err=True)

    orchestrator = Orchestrator(
        driver,
        timing=config.timing,
        event_bus=event_bus,
        confirm=None if yes else _confirm,
        control=RunControl(),
    )

    try:
        with stop_on_signals(orchestrator.control):
            stats = orchestrator.start(old_value, new_value)
    except RunFailedError as e:
        _write_report(e.stats)
        if output_format == "console":
            typer.echo(f"Error during run: {e.cause}", err=True)
        raise typer.Exit(EXIT_FAILED) from None
    except (KeyboardInterrupt, typer.Abort):
        if orchestrator.get_stats() is None:
            typer.echo("Interrupted before the run started; nothing was changed.", err=True)
        else:
            typer.echo("Interrupted; the record in progress may not have finished.", err=True)
        raise typer.Exit(EXIT_CANCELLED) from None
    finally:
        driver.close()

    if stats is None:
        typer.echo("Not confirmed; nothing was changed.", err=True)
        raise typer.Exit(EXIT_CANCELLED)

    _write_report(stats)

    exit_code = RunSummary.from_stats(stats).exit_code
    if exit_code != EXIT_OK:
        raise typer.Exit(exit_code)


@app.command()
def preview(
    settings: Path | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    old: str | None = typer.Option(
        None,
        "--old",
        help="Destination value to look for (defaults to the last one used).",
    ),
    output_format: Literal["console", "json"] = typer.Option(
        "console",
        "--format",
        "-f",
        help="Output format: 'console' or 'json'.",
    ),
) -> None:
    """Count the listed records a run would attempt, without editing anything."""
    from retarget.cli_formatters import format_preview
    from retarget.engine.orchestrator import Orchestrator

    config = _load_settings_or_exit(settings)
    store = PreferenceStore(config.preferences.path) if config.preferences.enabled else None
    remembered = store.load() if store is not None else LastUsedPair()
    old_value = _resolve_value(old, remembered.old_value, "Current destination")

    driver = _create_driver_or_exit(config)
    try:
        result = Orchestrator(driver, timing=config.timing).preview(old_value)
    except PreconditionError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_FAILED) from None
    except SurfaceError as e:
        typer.echo(f"Error reading the listing: {e}", err=True)
        raise typer.Exit(EXIT_FAILED) from None
    finally:
        driver.close()

    typer.echo(format_preview(result, output_format))


@app.command()
def drivers() -> None:
    """List available surface drivers."""
    available = _get_driver_manager().available
    if not available:
        typer.echo("No surface drivers registered.")
        return
    typer.secho("Available surface drivers:", fg=typer.colors.GREEN)
    for name in available:
        typer.echo(f"  - {name}")
