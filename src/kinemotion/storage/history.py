"""Persistent result history.

Results are kept newest-first as one JSON list stored under a single key
of a small JSON document. There is no schema versioning: a blob that no
longer validates is treated as empty history.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from kinemotion.core.config import StorageSettings
from kinemotion.core.exceptions import HistoryStorageError
from kinemotion.core.logging import get_logger
from kinemotion.core.types import AnalysisResult

logger = get_logger(__name__)

_RESULT_ADAPTER = TypeAdapter(AnalysisResult)
_HISTORY_ADAPTER = TypeAdapter(list[AnalysisResult])


def result_to_dict(result: AnalysisResult) -> dict[str, Any]:
    """JSON-compatible representation of a result."""
    return _RESULT_ADAPTER.dump_python(result, mode="json")


def result_from_dict(data: dict[str, Any]) -> AnalysisResult:
    """Rebuild a result from :func:`result_to_dict` output.

    Raises:
        ValidationError: If the data does not describe a result
    """
    return _RESULT_ADAPTER.validate_python(data)


class HistoryStore:
    """File-backed list of past analysis results."""

    def __init__(self, settings: StorageSettings | None = None) -> None:
        """Initialize store.

        Args:
            settings: Storage location and key (uses defaults if None)
        """
        self.settings = settings or StorageSettings()
        self.path = Path(self.settings.history_path)
        self.key = self.settings.history_key

    def load(self) -> list[AnalysisResult]:
        """Read the history, newest first.

        A missing, unreadable, or corrupt blob yields an empty list.
        """
        if not self.path.exists():
            return []

        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Failed to read history from %s: %s", self.path, e)
            return []

        if not isinstance(document, dict) or self.key not in document:
            return []

        try:
            return _HISTORY_ADAPTER.validate_python(document[self.key])
        except ValidationError as e:
            logger.error("Discarding unreadable history under %s: %s", self.key, e)
            return []

    def save(self, result: AnalysisResult) -> list[AnalysisResult]:
        """Prepend a result and persist the whole list.

        Returns:
            The updated history

        Raises:
            HistoryStorageError: If the history cannot be written
        """
        history = [result, *self.load()]
        self._write(history)
        logger.info("Saved result %s (%d in history)", result.id, len(history))
        return history

    def clear(self) -> None:
        """Remove all stored results.

        Raises:
            HistoryStorageError: If the history cannot be written
        """
        self._write([])
        logger.info("History cleared")

    def _write(self, history: list[AnalysisResult]) -> None:
        document = {self.key: _HISTORY_ADAPTER.dump_python(history, mode="json")}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        except OSError as e:
            raise HistoryStorageError(f"Failed to write history to {self.path}: {e}") from e
