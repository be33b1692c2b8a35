"""CSV export of the diagnostic log."""

import csv
from pathlib import Path
from typing import Any, Iterable, Sequence

from ..core.models import HistoryRecord

HISTORY_HEADERS = (
    "id",
    "machine_id",
    "machine_name",
    "created_at",
    "status",
    "db",
    "peak_frequency",
)


def write_rows(path: Path, headers: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
    """
    Write a header row and all data rows to a CSV file.

    Directories are created as needed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(headers)
        writer.writerows(rows)


def export_history_csv(records: Iterable[HistoryRecord], path: Path) -> None:
    """Write ``records`` in the given order (most recent first) to ``path``."""
    rows = (
        [r.id, r.machine_id, r.machine_name, r.created_at.isoformat(), r.status.value, r.db, r.peak_frequency]
        for r in records
    )
    write_rows(Path(path), HISTORY_HEADERS, rows)
