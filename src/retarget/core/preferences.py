"""Persistence of the last-used (old, new) pair across sessions.

Read when a front end starts so its inputs can be prefilled, written when
the operator changes them. The engine never reads it: a run only ever sees
the values it was started with.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LastUsedPair:
    """The most recently entered values. Either side may be empty."""

    old_value: str = ""
    new_value: str = ""


class PreferenceStore:
    """JSON-file store for the last-used pair.

    A missing file reads as an empty pair. A corrupt file also reads as an
    empty pair (and is logged), because prefill is a convenience: refusing to
    start over it would be worse than starting blank.
    """

    def __init__(self, path: Path) -> None:
        self._path = path.expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> LastUsedPair:
        """Read the stored pair."""
        if not self._path.exists():
            return LastUsedPair()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable preferences file", path=str(self._path), error=str(e))
            return LastUsedPair()
        if not isinstance(data, dict):
            logger.warning("Ignoring preferences file that is not a JSON object", path=str(self._path))
            return LastUsedPair()
        old_value = data.get("old_value", "")
        new_value = data.get("new_value", "")
        return LastUsedPair(
            old_value=old_value if isinstance(old_value, str) else "",
            new_value=new_value if isinstance(new_value, str) else "",
        )

    def save(self, pair: LastUsedPair) -> bool:
        """Write the pair atomically (temp file + rename).

        Returns:
            False when the file could not be written (logged, not raised).
        """
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps({"old_value": pair.old_value, "new_value": pair.new_value}, indent=2),
                encoding="utf-8",
            )
            os.replace(tmp_path, self._path)
        except OSError as e:
            logger.warning("Could not save preferences file", path=str(self._path), error=str(e))
            return False
        return True
