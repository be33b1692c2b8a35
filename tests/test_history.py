from __future__ import annotations

import csv
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from acousticdiag.core.errors import InvalidCalibration
from acousticdiag.core.models import DiagnosticStatus, HistoryRecord
from acousticdiag.dataio.csv_writer import HISTORY_HEADERS, export_history_csv
from acousticdiag.dataio.history import HistoryStore
from acousticdiag.dataio.settings import CALIBRATION_KEY, SettingsStore

T0 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def _record(i: int) -> HistoryRecord:
    return HistoryRecord(
        machine_id="m1",
        machine_name="Washing Machine - Spin Cycle",
        status=DiagnosticStatus.NORMAL if i % 2 else DiagnosticStatus.ABNORMAL,
        db=60.0 + i / 10,
        peak_frequency=100 + i,
        created_at=T0 + timedelta(minutes=i),
        id=f"rec-{i}",
    )


def test_fifty_first_append_evicts_oldest(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history.json")
    for i in range(51):
        history = store.append_history(_record(i))
    assert len(history) == 50
    assert history[0].id == "rec-50"
    assert history[-1].id == "rec-1"
    assert [r.id for r in store.load_history()] == [r.id for r in history]


def test_eviction_is_by_insertion_order_not_timestamp(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history.json", limit=2)
    late = HistoryRecord("m1", "A", DiagnosticStatus.NORMAL, 60.0, 100, created_at=T0 + timedelta(days=1), id="late")
    early = HistoryRecord("m1", "A", DiagnosticStatus.NORMAL, 60.0, 100, created_at=T0, id="early")
    store.append_history(late)
    store.append_history(early)
    store.append_history(_record(9))
    assert [r.id for r in store.load_history()] == ["rec-9", "early"]


def test_records_survive_reload(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history.json")
    store.append_history(_record(3))
    (loaded,) = HistoryStore(tmp_path / "history.json").load_history()
    assert loaded == _record(3)
    assert loaded.created_at.tzinfo is not None


def test_missing_or_corrupt_file_loads_empty(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    store = HistoryStore(path)
    assert store.load_history() == []
    path.write_text("{not json", encoding="utf-8")
    assert store.load_history() == []
    path.write_text(json.dumps({"records": []}), encoding="utf-8")
    assert store.load_history() == []


def test_malformed_entries_are_skipped(tmp_path: Path) -> None:
    path = tmp_path / "history.json"
    path.write_text(json.dumps([{"id": "broken"}, _record(1).to_mapping()]), encoding="utf-8")
    assert [r.id for r in HistoryStore(path).load_history()] == ["rec-1"]


def test_clear_history(tmp_path: Path) -> None:
    store = HistoryStore(tmp_path / "history.json")
    store.append_history(_record(1))
    store.clear_history()
    assert store.load_history() == []
    store.clear_history()


def test_export_history_csv(tmp_path: Path) -> None:
    out = tmp_path / "exports" / "log.csv"
    export_history_csv([_record(2), _record(1)], out)
    with out.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.reader(fh))
    assert tuple(rows[0]) == HISTORY_HEADERS
    assert [row[0] for row in rows[1:]] == ["rec-2", "rec-1"]
    assert rows[1][4] == "ABNORMAL"


def test_settings_default_and_round_trip(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.yaml")
    assert store.load_calibration() == -20.0
    assert store.save_calibration("7.5") == 7.5
    assert SettingsStore(tmp_path / "settings.yaml").load_calibration() == 7.5
    store.save_calibration(-3)
    assert store.load_calibration() == -3.0


def test_settings_reject_invalid_values(tmp_path: Path) -> None:
    path = tmp_path / "settings.yaml"
    store = SettingsStore(path)
    store.save_calibration(4)
    with pytest.raises(InvalidCalibration):
        store.save_calibration(61)
    assert store.load_calibration() == 4.0

    path.write_text(f"{CALIBRATION_KEY}: 500\n", encoding="utf-8")
    assert store.load_calibration() == -20.0
