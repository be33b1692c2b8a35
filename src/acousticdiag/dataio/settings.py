"""Persisted user settings (currently the calibration offset)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from ..core.calibration import DEFAULT_CALIBRATION_OFFSET, parse_calibration
from ..core.errors import InvalidCalibration

logger = logging.getLogger(__name__)

CALIBRATION_KEY = "calibration_offset_db"


class SettingsStore:
    """YAML-backed key/value settings; the last write wins."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _load_raw(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError):
            logger.exception("Failed to read settings file %s", self.path)
            return {}
        return dict(raw) if isinstance(raw, dict) else {}

    def load_calibration(self) -> float:
        """Return the stored offset, or the default when missing or invalid."""
        raw = self._load_raw()
        if CALIBRATION_KEY not in raw:
            return DEFAULT_CALIBRATION_OFFSET
        try:
            return parse_calibration(raw[CALIBRATION_KEY])
        except InvalidCalibration as exc:
            logger.warning("Ignoring stored calibration: %s", exc)
            return DEFAULT_CALIBRATION_OFFSET

    def save_calibration(self, value: Any) -> float:
        """Validate and persist ``value``; raises :class:`InvalidCalibration`."""
        offset = parse_calibration(value)
        data = self._load_raw()
        data[CALIBRATION_KEY] = offset
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as fh:
            yaml.safe_dump(data, fh, default_flow_style=False, sort_keys=False)
        return offset


__all__ = ["CALIBRATION_KEY", "SettingsStore"]
