"""FFT helpers and the fixed-size byte spectrum analyzer."""

from __future__ import annotations

from typing import Tuple

import numpy as np
from numpy.typing import ArrayLike
from scipy import signal as sp_signal

MIN_FFT_SIZE = 32
MAX_FFT_SIZE = 32768


def compute_fft(
    signal: ArrayLike,
    sample_rate_hz: float,
    *,
    axis: int = -1,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute frequency bins and magnitudes for a real-valued signal.

    Parameters
    ----------
    signal:
        Array-like input signal. Can be 1-D or ND.
    sample_rate_hz:
        Sampling rate in Hz. Must be > 0.
    axis:
        Axis along which to compute the FFT (default: last axis).

    Returns
    -------
    freqs : np.ndarray
        1-D array of frequency bins in Hz.
    magnitude : np.ndarray
        Magnitude of the one-sided FFT along the given axis.
    """
    if sample_rate_hz <= 0:
        raise ValueError(f"sample_rate_hz must be > 0, got {sample_rate_hz}")

    arr = np.asarray(signal, dtype=float)
    if arr.size == 0:
        raise ValueError("signal must contain at least one sample")

    fft_result = np.fft.rfft(arr, axis=axis)
    n_samples = arr.shape[axis]
    freqs = np.fft.rfftfreq(n_samples, d=1.0 / float(sample_rate_hz))
    magnitude = np.abs(fft_result)

    return freqs, magnitude


def is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


class SpectrumAnalyzer:
    """
    Byte-scaled magnitude spectrum over a fixed power-of-two block.

    Each call windows the block (Blackman), takes the one-sided FFT,
    normalises by the block length and maps
    ``[min_decibels, max_decibels]`` onto ``0..255``. Nothing is carried
    between calls: the same block always yields the same array.
    """

    def __init__(
        self,
        sample_rate_hz: float,
        fft_size: int = 2048,
        *,
        min_decibels: float = -100.0,
        max_decibels: float = -30.0,
    ) -> None:
        if sample_rate_hz <= 0:
            raise ValueError(f"sample_rate_hz must be > 0, got {sample_rate_hz}")
        fft_size = int(fft_size)
        if not is_power_of_two(fft_size) or not MIN_FFT_SIZE <= fft_size <= MAX_FFT_SIZE:
            raise ValueError(
                f"fft_size must be a power of two in [{MIN_FFT_SIZE}, {MAX_FFT_SIZE}], got {fft_size}"
            )
        if max_decibels <= min_decibels:
            raise ValueError("max_decibels must be greater than min_decibels")

        self.sample_rate_hz = float(sample_rate_hz)
        self.fft_size = fft_size
        self.min_decibels = float(min_decibels)
        self.max_decibels = float(max_decibels)
        self._window = sp_signal.get_window("blackman", fft_size, fftbins=True)

    @property
    def bin_count(self) -> int:
        return self.fft_size // 2

    @property
    def bin_width_hz(self) -> float:
        return self.sample_rate_hz / self.fft_size

    def bin_to_hz(self, bin_index: float) -> float:
        return float(bin_index) * self.sample_rate_hz / self.fft_size

    def bin_frequencies(self) -> np.ndarray:
        return np.arange(self.bin_count, dtype=np.float64) * self.sample_rate_hz / self.fft_size

    def magnitudes_db(self, block: ArrayLike) -> np.ndarray:
        """Per-bin magnitude in dBFS (``-inf`` for empty bins)."""
        data = np.asarray(block, dtype=np.float64).reshape(-1)
        if data.size != self.fft_size:
            raise ValueError(f"block must contain {self.fft_size} samples, got {data.size}")
        _, magnitude = compute_fft(data * self._window, self.sample_rate_hz)
        magnitude = magnitude[: self.bin_count] / self.fft_size
        with np.errstate(divide="ignore"):
            return 20.0 * np.log10(magnitude)

    def magnitudes(self, block: ArrayLike) -> np.ndarray:
        """Byte-scaled magnitudes (``uint8``), one per bin."""
        db = self.magnitudes_db(block)
        scale = 255.0 / (self.max_decibels - self.min_decibels)
        scaled = np.floor(scale * (db - self.min_decibels))
        return np.clip(np.nan_to_num(scaled, neginf=0.0), 0.0, 255.0).astype(np.uint8)


__all__ = ["compute_fft", "is_power_of_two", "SpectrumAnalyzer"]
