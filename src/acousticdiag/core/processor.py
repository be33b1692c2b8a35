"""Per-session measurement pipeline: weighting, spectrum, level, verdict."""

from __future__ import annotations

import logging
import threading
from typing import Any, Tuple

import numpy as np
from numpy.typing import ArrayLike

from ..analysis.classifier import classify
from ..analysis.features import LevelExtractor
from ..analysis.fft import SpectrumAnalyzer
from ..analysis.filters import AWeightingFilter
from ..config.runtime import DiagConfig
from .calibration import parse_calibration
from .errors import PipelineNotReady
from .models import MachineProfile, Metrics, SampleWindow
from .ringbuffer import SampleRingBuffer

logger = logging.getLogger(__name__)


class AudioProcessor:
    """
    Filter graph and analysis chain owned by one running session.

    :meth:`feed` is called from the audio callback thread with raw blocks;
    :meth:`metrics` and :meth:`frequency_data` are polled from the display
    thread. A lock guards the filter state and the sample ring.
    """

    def __init__(self, config: DiagConfig | None = None, calibration_offset: Any = 0.0) -> None:
        self.config = (config or DiagConfig()).sanitized()
        self._calibration_offset = parse_calibration(calibration_offset)
        self._filter = AWeightingFilter(self.config.sample_rate_hz)
        self._analyzer = SpectrumAnalyzer(
            self.config.sample_rate_hz,
            self.config.fft_size,
            min_decibels=self.config.min_decibels,
            max_decibels=self.config.max_decibels,
        )
        self._extractor = LevelExtractor(
            self._analyzer,
            reference_offset=self.config.reference_offset_db,
            stability_threshold=self.config.stability_threshold,
            floor=self.config.rms_floor,
        )
        self._ring = SampleRingBuffer(self.config.fft_size)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------ properties
    @property
    def analyzer(self) -> SpectrumAnalyzer:
        return self._analyzer

    @property
    def weighting(self) -> AWeightingFilter:
        return self._filter

    @property
    def calibration_offset(self) -> float:
        return self._calibration_offset

    @property
    def is_ready(self) -> bool:
        with self._lock:
            return self._ring.total_written > 0

    # ------------------------------------------------------------------ input
    def feed(self, block: ArrayLike) -> None:
        """Weight one block of raw samples and append it to the window."""
        data = np.asarray(block, dtype=np.float64)
        if data.ndim > 1:
            # Keep the first channel of (frames, channels) input.
            data = data[:, 0]
        with self._lock:
            self._ring.extend(self._filter.process(data))

    def set_calibration(self, offset: Any) -> None:
        """Swap the calibration offset; filter state is left untouched."""
        value = parse_calibration(offset)
        with self._lock:
            self._calibration_offset = value
        logger.debug("Calibration offset set to %.1f dB", value)

    def reset(self) -> None:
        with self._lock:
            self._ring.clear()
            self._filter.reset()

    # ------------------------------------------------------------------ output
    def window(self) -> SampleWindow:
        """Copy of the latest filtered block and its byte spectrum."""
        with self._lock:
            if self._ring.total_written == 0:
                raise PipelineNotReady("no audio has reached the processor yet")
            samples = self._ring.snapshot()
        return SampleWindow(
            samples=samples,
            magnitudes=self._analyzer.magnitudes(samples),
            sample_rate_hz=self._analyzer.sample_rate_hz,
            fft_size=self._analyzer.fft_size,
        )

    def frequency_data(self) -> np.ndarray:
        try:
            return self.window().magnitudes
        except PipelineNotReady:
            return np.zeros(0, dtype=np.uint8)

    def metrics_for_window(self, window: SampleWindow, profile: MachineProfile) -> Metrics:
        reading = self._extractor.extract(window.samples, window.magnitudes, self._calibration_offset)
        status = classify(
            reading.db_raw,
            reading.peak_hz_raw,
            reading.max_magnitude,
            profile,
            significant_magnitude=self.config.significant_magnitude,
        )
        return Metrics(
            db=reading.db,
            peak_frequency=reading.peak_frequency,
            is_stable=reading.is_stable,
            status=status,
        )

    def snapshot(self, profile: MachineProfile) -> Tuple[Metrics, np.ndarray]:
        """Metrics and byte spectrum computed from the same window."""
        try:
            window = self.window()
        except PipelineNotReady:
            return Metrics.idle(), np.zeros(0, dtype=np.uint8)
        return self.metrics_for_window(window, profile), window.magnitudes

    def metrics(self, profile: MachineProfile) -> Metrics:
        """Current metrics for ``profile``; the idle snapshot until audio arrives."""
        try:
            window = self.window()
        except PipelineNotReady:
            return Metrics.idle()
        return self.metrics_for_window(window, profile)


__all__ = ["AudioProcessor"]
