"""Append-only, capped log of diagnostic verdicts stored as JSON."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Sequence

from ..core.models import HistoryRecord

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class HistoryStore:
    """
    JSON-backed history of :class:`HistoryRecord` entries.

    Entries are kept most recent first. Appending beyond ``limit`` evicts the
    oldest entries by insertion order; timestamps are never compared.
    """

    def __init__(self, path: Path | str, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit <= 0:
            raise ValueError("limit must be positive")
        self.path = Path(path)
        self.limit = int(limit)

    def load_history(self) -> List[HistoryRecord]:
        """Return stored records (most recent first); unreadable files yield ``[]``."""
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except (OSError, json.JSONDecodeError):
            logger.exception("Failed to read history file %s", self.path)
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring history file %s: expected a list", self.path)
            return []

        records: List[HistoryRecord] = []
        for entry in raw:
            try:
                records.append(HistoryRecord.from_mapping(entry))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed history entry %r: %s", entry, exc)
        return records[: self.limit]

    def append_history(self, record: HistoryRecord) -> List[HistoryRecord]:
        """Prepend ``record``, trim to ``limit`` and persist; returns the new list."""
        records = [record, *self.load_history()][: self.limit]
        self._write(records)
        logger.info(
            "Recorded %s verdict for %s (%.1f dB, %d Hz)",
            record.status.value,
            record.machine_name,
            record.db,
            record.peak_frequency,
        )
        return records

    def clear_history(self) -> None:
        if self.path.exists():
            self.path.unlink()
        logger.info("Cleared diagnostic history at %s", self.path)

    def _write(self, records: Sequence[HistoryRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump([r.to_mapping() for r in records], fh, indent=2)
        tmp_path.replace(self.path)


__all__ = ["DEFAULT_HISTORY_LIMIT", "HistoryStore"]
