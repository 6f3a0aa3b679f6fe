# src/retarget/engine/export.py
"""Report export for run statistics.

Two formats:
- JSON: the whole RunStats snapshot as one pretty-printed document
- CSV: one row per outcome (counters and timing are left to the JSON form,
  CSV requires a homogeneous schema)

Export is a pure transformation of a snapshot; it never touches the ledger.
"""

from __future__ import annotations

import csv
import json
import time
from pathlib import Path

from retarget.contracts import ExportFormat, RunStats

_CSV_FIELDS: tuple[str, ...] = (
    "index",
    "kind",
    "old_value",
    "new_value",
    "observed_value",
    "reason",
    "unconfirmed",
    "message",
)


def default_report_name(fmt: ExportFormat = ExportFormat.JSON, *, epoch_ms: int | None = None) -> str:
    """File name for a report generated now: ``retarget-stats-<epoch-ms>.<ext>``."""
    if epoch_ms is None:
        epoch_ms = time.time_ns() // 1_000_000
    return f"retarget-stats-{epoch_ms}.{fmt.value}"


def render_json(stats: RunStats) -> str:
    return json.dumps(stats.to_dict(), indent=2)


def export_stats(stats: RunStats, destination: Path, fmt: ExportFormat = ExportFormat.JSON) -> Path:
    """Write a report for ``stats``.

    Args:
        stats: Snapshot to export (sealed or not).
        destination: Target file, or an existing directory to receive a
            file named by default_report_name().
        fmt: Report format.

    Returns:
        Path of the written file.
    """
    path = destination / default_report_name(fmt) if destination.is_dir() else destination
    path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == ExportFormat.JSON:
        path.write_text(render_json(stats) + "\n", encoding="utf-8")
        return path

    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(_CSV_FIELDS), extrasaction="ignore")
        writer.writeheader()
        for outcome in stats.outcomes:
            row = {name: "" for name in _CSV_FIELDS}
            for key, value in outcome.to_dict().items():
                row[key] = "" if value is None else value
            writer.writerow(row)
    return path
