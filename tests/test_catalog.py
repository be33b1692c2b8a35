from __future__ import annotations

from pathlib import Path

import pytest

from acousticdiag.config.catalog import catalog_from_mapping, find_machine, load_catalog


def test_packaged_catalog_matches_reference_machines() -> None:
    catalog = load_catalog()
    assert len(catalog) == 5
    washer = find_machine(catalog, "m1")
    assert washer.name == "Washing Machine - Spin Cycle"
    assert washer.max_db == 72.0
    assert washer.peak_freq_range == (50.0, 200.0)
    assert find_machine(catalog, "m3").peak_freq_range == (800.0, 2000.0)
    assert [p.max_db for p in catalog] == [72.0, 85.0, 105.0, 78.0, 65.0]


def test_unknown_machine_raises_key_error() -> None:
    with pytest.raises(KeyError):
        find_machine(load_catalog(), "m99")


def test_bare_list_is_accepted(tmp_path: Path) -> None:
    path = tmp_path / "machines.yaml"
    path.write_text(
        "- id: fan\n  name: Fan\n  max_db: 60\n  peak_freq_range: [20, 80]\n",
        encoding="utf-8",
    )
    (fan,) = load_catalog(path)
    assert fan.category == ""
    assert fan.peak_freq_low == 20.0


@pytest.mark.parametrize(
    "data",
    [
        {"machines": [{"id": "a", "name": "A", "max_db": 1, "peak_freq_range": [1, 2]}] * 2},
        {"machines": [{"id": "a", "name": "A", "max_db": 1, "peak_freq_range": [5, 2]}]},
        {"machines": [{"id": "a", "name": "A", "peak_freq_range": [1, 2]}]},
        {"machines": [{"id": "a", "name": "A", "max_db": "loud", "peak_freq_range": [1, 2]}]},
        {"machines": "m1"},
        {"machines": ["m1"]},
    ],
)
def test_invalid_catalogs_raise_value_error(data) -> None:
    with pytest.raises(ValueError):
        catalog_from_mapping(data)
