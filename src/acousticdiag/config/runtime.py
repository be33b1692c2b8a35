"""Runtime configuration for the measurement pipeline and sessions."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, MutableMapping

import yaml

from ..analysis.fft import MAX_FFT_SIZE, MIN_FFT_SIZE, is_power_of_two

# The 12.2 kHz low-pass stage of the weighting cascade needs a Nyquist above it.
MIN_SAMPLE_RATE_HZ = 32000.0


@dataclass(slots=True)
class DiagConfig:
    """
    Tuning knobs for sampling, analysis, and the diagnostic window.

    The defaults mirror a 48 kHz microphone feeding a ~60 Hz display with a
    2048-point transform and a 10 second window.
    """

    sample_rate_hz: float = 48000.0
    block_size: int = 1024
    fft_size: int = 2048

    diagnostic_window_s: int = 10
    refresh_hz: float = 60.0

    reference_offset_db: float = 100.0
    rms_floor: float = 1e-6
    stability_threshold: float = 0.001
    significant_magnitude: float = 200.0
    min_decibels: float = -100.0
    max_decibels: float = -30.0

    history_limit: int = 50

    def sanitized(self) -> DiagConfig:
        """Return a copy with derived limits applied."""
        fft_size = int(self.fft_size)
        if not is_power_of_two(fft_size):
            fft_size = 2048
        fft_size = max(MIN_FFT_SIZE, min(MAX_FFT_SIZE, fft_size))
        min_db = float(self.min_decibels)
        max_db = float(self.max_decibels)
        if max_db <= min_db:
            min_db, max_db = -100.0, -30.0
        return DiagConfig(
            sample_rate_hz=max(MIN_SAMPLE_RATE_HZ, float(self.sample_rate_hz)),
            block_size=max(16, int(self.block_size)),
            fft_size=fft_size,
            diagnostic_window_s=max(1, int(self.diagnostic_window_s)),
            refresh_hz=max(1.0, min(240.0, float(self.refresh_hz))),
            reference_offset_db=float(self.reference_offset_db),
            rms_floor=max(1e-12, float(self.rms_floor)),
            stability_threshold=max(0.0, float(self.stability_threshold)),
            significant_magnitude=float(self.significant_magnitude),
            min_decibels=min_db,
            max_decibels=max_db,
            history_limit=max(1, int(self.history_limit)),
        )

    def refresh_interval_ms(self) -> int:
        """Timer interval that corresponds to ``refresh_hz``."""
        return max(1, int(round(1000.0 / max(1.0, float(self.refresh_hz)))))


def _recognized_fields() -> set[str]:
    """Return the dataclass field names accepted by :class:`DiagConfig`."""
    return {f.name for f in fields(DiagConfig)}


def _normalize_mapping(data: Mapping[str, Any]) -> MutableMapping[str, Any]:
    """Flatten known nesting patterns (e.g. top-level ``diagnostics`` key)."""
    if "diagnostics" in data and isinstance(data["diagnostics"], Mapping):
        merged: MutableMapping[str, Any] = {}
        for key, value in data.items():
            if key == "diagnostics":
                merged.update(value)
            else:
                merged[key] = value
        return merged
    return dict(data)


def config_from_mapping(data: Mapping[str, Any] | None) -> DiagConfig:
    """Build :class:`DiagConfig` from ``data`` (ignoring unknown keys)."""
    if not data:
        return DiagConfig()
    normalized = _normalize_mapping(data)
    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    return DiagConfig(**payload).sanitized()


def load_config(path: str | Path | None) -> DiagConfig:
    """
    Load configuration from ``path``.

    Missing files fall back to default :class:`DiagConfig`.
    """
    if path is None:
        return DiagConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return DiagConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["DiagConfig", "config_from_mapping", "load_config"]
