"""Validation of the user-adjustable calibration offset."""

from __future__ import annotations

import math
from typing import Any

from .errors import InvalidCalibration

CALIBRATION_MIN_DB = -60.0
CALIBRATION_MAX_DB = 60.0
CALIBRATION_STEP_DB = 0.5
DEFAULT_CALIBRATION_OFFSET = -20.0


def parse_calibration(value: Any) -> float:
    """
    Convert ``value`` into a calibration offset in dB.

    Strings (as produced by a slider or text field) and numbers are accepted.
    Anything that is not a finite number in
    ``[CALIBRATION_MIN_DB, CALIBRATION_MAX_DB]`` raises
    :class:`InvalidCalibration`; values are never clamped.
    """
    if isinstance(value, bool):
        raise InvalidCalibration(f"calibration must be a number, got {value!r}")
    try:
        offset = float(str(value).strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        raise InvalidCalibration(f"calibration must be a number, got {value!r}") from None
    if not math.isfinite(offset):
        raise InvalidCalibration(f"calibration must be finite, got {value!r}")
    if offset < CALIBRATION_MIN_DB or offset > CALIBRATION_MAX_DB:
        raise InvalidCalibration(
            f"calibration must be within [{CALIBRATION_MIN_DB:g}, {CALIBRATION_MAX_DB:g}] dB, "
            f"got {offset:g}"
        )
    return offset


__all__ = [
    "CALIBRATION_MIN_DB",
    "CALIBRATION_MAX_DB",
    "CALIBRATION_STEP_DB",
    "DEFAULT_CALIBRATION_OFFSET",
    "parse_calibration",
]
