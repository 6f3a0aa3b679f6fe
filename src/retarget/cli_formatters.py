# src/retarget/cli_formatters.py
"""CLI event formatter factories for run output.

Provides factory functions that return event handler maps for console
(human-readable) and JSON (one object per line) output formats. Each
factory returns a dict mapping event types to handler callables, ready to
pass straight to EventBus().
"""

from __future__ import annotations

import json
from collections.abc import Callable

import typer

from retarget.contracts import (
    Error,
    Failed,
    Outcome,
    PreviewResult,
    RecordProcessed,
    RunStarted,
    RunSummary,
    Skipped,
    Success,
)


def describe_outcome(outcome: Outcome) -> str:
    """One-line human description of an outcome."""
    match outcome:
        case Success(index=index, old_value=old, new_value=new):
            return f"#{index} ✓ {old} → {new}"
        case Failed(index=index, reason=reason, observed_value=observed) if observed is not None:
            return f"#{index} ✗ {reason.value} (found {observed!r})"
        case Failed(index=index, reason=reason) if reason.is_ambiguous:
            return f"#{index} ? {reason.value} (change may have been applied)"
        case Failed(index=index, reason=reason):
            return f"#{index} ✗ {reason.value}"
        case Skipped(index=index, reason=reason, observed_value=observed):
            return f"#{index} - {reason.value} ({observed!r})"
        case Error(index=index, message=message):
            return f"#{index} ! error: {message}"
    raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")


def create_console_formatters(*, show_skipped: bool = False) -> dict[type, Callable[..., None]]:
    """Create console formatters for human-readable CLI output.

    Args:
        show_skipped: Also print a line for every skipped record.
    """

    def _format_run_started(event: RunStarted) -> None:
        typer.echo(f"Retargeting {event.expected_old} → {event.desired_new} across {event.total_count:,} listed records...")

    def _format_record_processed(event: RecordProcessed) -> None:
        if isinstance(event.outcome, Skipped) and not show_skipped:
            return
        stats = event.stats
        typer.echo(f"  [{stats.processed_count}/{stats.total_count}] {describe_outcome(event.outcome)}")

    def _format_run_summary(event: RunSummary) -> None:
        status_symbols = {
            "completed": "✓",
            "partial": "⚠",
            "failed": "✗",
            "cancelled": "■",
        }
        symbol = status_symbols[event.status.value]
        stats = event.stats
        duration = stats.duration_seconds or 0.0
        typer.echo(
            f"\n{symbol} Run {event.status.value.upper()}: "
            f"{stats.processed_count:,}/{stats.total_count:,} records visited | "
            f"{stats.matched_count:,} matched | "
            f"✓{stats.succeeded:,} updated | "
            f"✗{stats.failed:,} failed | "
            f"?{stats.unconfirmed:,} unconfirmed | "
            f"!{stats.errored:,} errors | "
            f"{duration:.2f}s total"
        )
        if stats.error:
            typer.echo(f"  Run error: {stats.error}", err=True)

    return {
        RunStarted: _format_run_started,
        RecordProcessed: _format_record_processed,
        RunSummary: _format_run_summary,
    }


def create_json_formatters() -> dict[type, Callable[..., None]]:
    """Create JSON formatters: one JSON object per line on stdout."""

    def _format_run_started_json(event: RunStarted) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "run_started",
                    "run_id": event.run_id,
                    "expected_old": event.expected_old,
                    "desired_new": event.desired_new,
                    "total_count": event.total_count,
                }
            )
        )

    def _format_record_processed_json(event: RecordProcessed) -> None:
        typer.echo(
            json.dumps(
                {
                    "event": "record_processed",
                    "outcome": event.outcome.to_dict(),
                    "processed_count": event.stats.processed_count,
                    "total_count": event.stats.total_count,
                }
            )
        )

    def _format_run_summary_json(event: RunSummary) -> None:
        stats = event.stats
        typer.echo(
            json.dumps(
                {
                    "event": "run_completed",
                    "run_id": stats.run_id,
                    "status": event.status.value,
                    "exit_code": event.exit_code,
                    "processed_count": stats.processed_count,
                    "total_count": stats.total_count,
                    "matched_count": stats.matched_count,
                    "succeeded": stats.succeeded,
                    "failed": stats.failed,
                    "unconfirmed": stats.unconfirmed,
                    "skipped": stats.skipped,
                    "errored": stats.errored,
                    "duration_seconds": stats.duration_seconds,
                    "error": stats.error,
                }
            )
        )

    return {
        RunStarted: _format_run_started_json,
        RecordProcessed: _format_record_processed_json,
        RunSummary: _format_run_summary_json,
    }


def format_preview(result: PreviewResult, output_format: str) -> str:
    """Render a preview for the console or as a JSON document."""
    if output_format == "json":
        return json.dumps(
            {
                "event": "preview",
                "expected_old": result.expected_old,
                "total_count": result.total_count,
                "matching_count": result.matching_count,
                "matching_indices": list(result.matching_indices),
                "unreadable_indices": list(result.unreadable_indices),
            }
        )
    lines = [f"{result.matching_count:,} of {result.total_count:,} listed records match {result.expected_old!r}"]
    if result.matching_indices:
        lines.append("  Matching: " + ", ".join(f"#{i}" for i in result.matching_indices))
    if result.unreadable_indices:
        lines.append("  Unreadable: " + ", ".join(f"#{i}" for i in result.unreadable_indices))
    return "\n".join(lines)
