"""Biquad design and the fixed A-weighting approximation cascade."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
from numpy.typing import ArrayLike
from scipy import signal


@dataclass(frozen=True)
class BiquadStage:
    kind: str
    frequency_hz: float
    gain_db: float = 0.0


# Two high-pass stages, one low-pass stage, and a small presence boost that
# together approximate the A-weighting curve.
A_WEIGHTING_STAGES: Tuple[BiquadStage, ...] = (
    BiquadStage("highpass", 20.6),
    BiquadStage("highpass", 107.7),
    BiquadStage("lowpass", 12200.0),
    BiquadStage("peaking", 2500.0, gain_db=1.2),
)

_KINDS = {"lowpass", "highpass", "peaking"}


def design_biquad(
    kind: str,
    frequency_hz: float,
    sample_rate_hz: float,
    *,
    q: Optional[float] = None,
    gain_db: float = 0.0,
) -> np.ndarray:
    """
    Design one second-order section using the audio EQ cookbook.

    Parameters
    ----------
    kind:
        One of ``"lowpass"``, ``"highpass"``, ``"peaking"``.
    frequency_hz:
        Corner (or centre) frequency in Hz, 0 < f < Nyquist.
    sample_rate_hz:
        Sampling rate in Hz. Must be > 0.
    q:
        Resonance. For low/high-pass it is expressed in dB (default 1 dB);
        for peaking it is the linear Q (default 1).
    gain_db:
        Boost/cut in dB, only used by ``peaking``.

    Returns
    -------
    np.ndarray
        Row ``[b0, b1, b2, 1, a1, a2]`` normalised by ``a0`` (scipy SOS layout).
    """
    if kind not in _KINDS:
        raise ValueError(f"Unknown biquad kind {kind!r}")
    if sample_rate_hz <= 0:
        raise ValueError(f"sample_rate_hz must be > 0, got {sample_rate_hz}")
    nyquist = 0.5 * float(sample_rate_hz)
    if not 0.0 < frequency_hz < nyquist:
        raise ValueError(
            f"frequency_hz must be in (0, Nyquist={nyquist:.3f} Hz), got {frequency_hz}"
        )

    w0 = 2.0 * math.pi * float(frequency_hz) / float(sample_rate_hz)
    cos_w0 = math.cos(w0)
    sin_w0 = math.sin(w0)

    if kind == "peaking":
        q_lin = 1.0 if q is None else float(q)
        a_gain = 10.0 ** (float(gain_db) / 40.0)
        alpha = sin_w0 / (2.0 * q_lin)
        b = (1.0 + alpha * a_gain, -2.0 * cos_w0, 1.0 - alpha * a_gain)
        a = (1.0 + alpha / a_gain, -2.0 * cos_w0, 1.0 - alpha / a_gain)
    else:
        q_db = 1.0 if q is None else float(q)
        alpha = sin_w0 / (2.0 * 10.0 ** (q_db / 20.0))
        if kind == "lowpass":
            b = ((1.0 - cos_w0) / 2.0, 1.0 - cos_w0, (1.0 - cos_w0) / 2.0)
        else:
            b = ((1.0 + cos_w0) / 2.0, -(1.0 + cos_w0), (1.0 + cos_w0) / 2.0)
        a = (1.0 + alpha, -2.0 * cos_w0, 1.0 - alpha)

    a0 = a[0]
    return np.array(
        [b[0] / a0, b[1] / a0, b[2] / a0, 1.0, a[1] / a0, a[2] / a0],
        dtype=np.float64,
    )


def a_weighting_sos(
    sample_rate_hz: float,
    stages: Sequence[BiquadStage] = A_WEIGHTING_STAGES,
) -> np.ndarray:
    """Return the ``(n_stages, 6)`` SOS array of the weighting cascade."""
    return np.vstack(
        [
            design_biquad(stage.kind, stage.frequency_hz, sample_rate_hz, gain_db=stage.gain_db)
            for stage in stages
        ]
    )


def frequency_response(
    sos: np.ndarray,
    freqs_hz: ArrayLike,
    sample_rate_hz: float,
) -> np.ndarray:
    """Gain of ``sos`` in dB at ``freqs_hz``."""
    freqs = np.atleast_1d(np.asarray(freqs_hz, dtype=float))
    _, h = signal.sosfreqz(sos, worN=freqs, fs=float(sample_rate_hz))
    return 20.0 * np.log10(np.maximum(np.abs(h), 1e-12))


class AWeightingFilter:
    """
    Stateful filter graph owned by one measurement session.

    The delay elements of every stage persist between :meth:`process` calls,
    so feeding a stream block by block yields the same output as filtering it
    in one piece.
    """

    def __init__(
        self,
        sample_rate_hz: float,
        stages: Sequence[BiquadStage] = A_WEIGHTING_STAGES,
    ) -> None:
        self.sample_rate_hz = float(sample_rate_hz)
        self.stages = tuple(stages)
        self._sos = a_weighting_sos(self.sample_rate_hz, self.stages)
        self._zi = np.zeros((self._sos.shape[0], 2), dtype=np.float64)

    @property
    def sos(self) -> np.ndarray:
        return self._sos.copy()

    @property
    def state(self) -> np.ndarray:
        """Copy of the per-stage delay elements, shape ``(n_stages, 2)``."""
        return self._zi.copy()

    def process(self, block: ArrayLike) -> np.ndarray:
        data = np.asarray(block, dtype=np.float64).reshape(-1)
        if data.size == 0:
            return data
        out, self._zi = signal.sosfilt(self._sos, data, zi=self._zi)
        return out

    def reset(self) -> None:
        self._zi.fill(0.0)

    def response_db(self, freqs_hz: ArrayLike) -> np.ndarray:
        return frequency_response(self._sos, freqs_hz, self.sample_rate_hz)


__all__ = [
    "BiquadStage",
    "A_WEIGHTING_STAGES",
    "design_biquad",
    "a_weighting_sos",
    "frequency_response",
    "AWeightingFilter",
]
