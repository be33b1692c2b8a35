"""Level and peak extraction."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Union

import numpy as np
from numpy.typing import ArrayLike

from .fft import SpectrumAnalyzer

Number = Union[float, np.floating]

DEFAULT_REFERENCE_OFFSET_DB = 100.0
DEFAULT_RMS_FLOOR = 1e-6
DEFAULT_STABILITY_THRESHOLD = 0.001


def _to_1d_array(signal: ArrayLike) -> np.ndarray:
    """Convert input to a 1D float64 numpy array."""
    arr = np.asarray(signal, dtype=float)
    if arr.size == 0:
        raise ValueError("signal must contain at least one sample")
    if arr.ndim != 1:
        raise ValueError(f"signal must be 1-D, got shape {arr.shape}")
    return arr


def rms(signal: ArrayLike) -> Number:
    """
    Compute root-mean-square (RMS) value of a 1-D signal.

    Parameters
    ----------
    signal:
        1-D array-like of samples.

    Returns
    -------
    float
        RMS value of the signal.
    """
    arr = _to_1d_array(signal)
    return float(np.sqrt(np.mean(np.square(arr))))


def level_db(
    rms_value: float,
    *,
    reference_offset: float = DEFAULT_REFERENCE_OFFSET_DB,
    calibration_offset: float = 0.0,
    floor: float = DEFAULT_RMS_FLOOR,
) -> float:
    """
    Convert an RMS amplitude to the instrument's decibel scale.

    ``floor`` keeps silent blocks away from ``log10(0)``.
    """
    if floor <= 0:
        raise ValueError(f"floor must be > 0, got {floor}")
    return 20.0 * math.log10(max(float(rms_value), float(floor))) + reference_offset + calibration_offset


def peak_bin(magnitudes: ArrayLike) -> int:
    """Index of the largest magnitude; the first one wins on ties."""
    arr = _to_1d_array(magnitudes)
    return int(np.argmax(arr))


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with halves going up, e.g. ``round_half_up(2.5) == 3``."""
    factor = 10.0 ** ndigits
    return math.floor(float(value) * factor + 0.5) / factor


@dataclass(frozen=True)
class LevelReading:
    rms: float
    db_raw: float
    db: float
    peak_bin: int
    peak_hz_raw: float
    peak_frequency: int
    max_magnitude: float
    is_stable: bool


class LevelExtractor:
    """Turn one time-domain block plus its spectrum into a :class:`LevelReading`."""

    def __init__(
        self,
        analyzer: SpectrumAnalyzer,
        *,
        reference_offset: float = DEFAULT_REFERENCE_OFFSET_DB,
        stability_threshold: float = DEFAULT_STABILITY_THRESHOLD,
        floor: float = DEFAULT_RMS_FLOOR,
    ) -> None:
        self.analyzer = analyzer
        self.reference_offset = float(reference_offset)
        self.stability_threshold = float(stability_threshold)
        self.floor = float(floor)

    def extract(
        self,
        samples: ArrayLike,
        magnitudes: ArrayLike,
        calibration_offset: float = 0.0,
    ) -> LevelReading:
        rms_value = rms(samples)
        db_raw = level_db(
            rms_value,
            reference_offset=self.reference_offset,
            calibration_offset=calibration_offset,
            floor=self.floor,
        )
        mags = _to_1d_array(magnitudes)
        index = peak_bin(mags)
        peak_hz = self.analyzer.bin_to_hz(index)
        return LevelReading(
            rms=rms_value,
            db_raw=db_raw,
            db=round_half_up(db_raw, 1),
            peak_bin=index,
            peak_hz_raw=peak_hz,
            peak_frequency=int(round_half_up(peak_hz)),
            max_magnitude=float(mags[index]),
            is_stable=rms_value > self.stability_threshold,
        )


__all__ = [
    "DEFAULT_REFERENCE_OFFSET_DB",
    "DEFAULT_RMS_FLOOR",
    "DEFAULT_STABILITY_THRESHOLD",
    "rms",
    "level_db",
    "peak_bin",
    "round_half_up",
    "LevelReading",
    "LevelExtractor",
]
