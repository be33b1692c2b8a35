"""Static catalog of machine profiles."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Sequence, Tuple

import yaml

from ..core.models import MachineProfile

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_FILE = Path(__file__).resolve().parent / "machines.yaml"

Catalog = Tuple[MachineProfile, ...]


def profile_from_mapping(entry: Mapping[str, Any]) -> MachineProfile:
    """Build a :class:`MachineProfile` from one ``machines.yaml`` entry."""
    try:
        freq_range = entry["peak_freq_range"]
        low, high = (float(v) for v in freq_range)
        return MachineProfile(
            id=str(entry["id"]),
            name=str(entry["name"]),
            category=str(entry.get("category", "")),
            max_db=float(entry["max_db"]),
            peak_freq_range=(low, high),
        )
    except KeyError as exc:
        raise ValueError(f"Machine entry is missing {exc.args[0]!r}: {dict(entry)!r}") from None
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid machine entry {dict(entry)!r}: {exc}") from None


def catalog_from_mapping(data: Mapping[str, Any] | Sequence[Any] | None) -> Catalog:
    """
    Build the ordered catalog from parsed YAML.

    Both a top-level ``machines:`` list and a bare list are accepted.
    Duplicate ids are rejected.
    """
    if data is None:
        return ()
    entries = data.get("machines", []) if isinstance(data, Mapping) else data
    if not isinstance(entries, Sequence) or isinstance(entries, (str, bytes)):
        raise ValueError(f"Expected a list of machines, got {type(entries).__name__}")

    profiles: list[MachineProfile] = []
    seen: set[str] = set()
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise ValueError(f"Expected mapping for machine entry, got {type(entry).__name__}")
        profile = profile_from_mapping(entry)
        if profile.id in seen:
            raise ValueError(f"Duplicate machine id {profile.id!r}")
        seen.add(profile.id)
        profiles.append(profile)
    return tuple(profiles)


def load_catalog(path: str | Path | None = None) -> Catalog:
    """Load the machine catalog (packaged ``machines.yaml`` when ``path`` is None)."""
    cat_path = Path(path) if path is not None else DEFAULT_CATALOG_FILE
    with cat_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    catalog = catalog_from_mapping(raw)
    logger.debug("Loaded %d machine profiles from %s", len(catalog), cat_path)
    return catalog


def find_machine(catalog: Sequence[MachineProfile], machine_id: str) -> MachineProfile:
    for profile in catalog:
        if profile.id == machine_id:
            return profile
    raise KeyError(f"Unknown machine id {machine_id!r}")


__all__ = [
    "Catalog",
    "DEFAULT_CATALOG_FILE",
    "profile_from_mapping",
    "catalog_from_mapping",
    "load_catalog",
    "find_machine",
]
