from __future__ import annotations

import numpy as np
import pytest

from acousticdiag.config.runtime import DiagConfig
from acousticdiag.core.errors import InvalidCalibration, PipelineNotReady
from acousticdiag.core.models import DiagnosticStatus, MachineProfile, Metrics
from acousticdiag.core.processor import AudioProcessor
from conftest import BIN_40_HZ, tone_blocks


def _fed_processor(amplitude: float = 0.02, calibration: float = 0.0) -> AudioProcessor:
    processor = AudioProcessor(DiagConfig(), calibration_offset=calibration)
    for block in tone_blocks(BIN_40_HZ, amplitude):
        processor.feed(block)
    return processor


def test_processor_is_idle_before_audio(drill: MachineProfile) -> None:
    processor = AudioProcessor()
    assert not processor.is_ready
    with pytest.raises(PipelineNotReady):
        processor.window()
    assert processor.metrics(drill) == Metrics.idle()
    assert processor.frequency_data().size == 0
    metrics, spectrum = processor.snapshot(drill)
    assert metrics.status is DiagnosticStatus.IDLE
    assert spectrum.size == 0


def test_tone_in_band_is_normal(drill: MachineProfile) -> None:
    processor = _fed_processor()
    metrics = processor.metrics(drill)
    assert metrics.peak_frequency == 938
    assert metrics.is_stable
    assert metrics.status is DiagnosticStatus.NORMAL
    assert 60.0 < metrics.db < 67.0
    assert metrics.db == round(metrics.db, 1)


def test_strong_tone_outside_band_is_abnormal() -> None:
    quiet_limit = MachineProfile("x", "Test rig", "Lab", max_db=120, peak_freq_range=(50, 200))
    metrics = _fed_processor(amplitude=0.2).metrics(quiet_limit)
    assert metrics.db < 120
    assert metrics.status is DiagnosticStatus.ABNORMAL


def test_snapshot_uses_one_window_for_metrics_and_spectrum(drill: MachineProfile) -> None:
    processor = _fed_processor()
    metrics, spectrum = processor.snapshot(drill)
    assert spectrum.shape == (1024,)
    assert int(np.argmax(spectrum)) == 40
    assert metrics == processor.metrics(drill)


def test_calibration_swap_keeps_filter_state(drill: MachineProfile) -> None:
    processor = _fed_processor()
    before = processor.metrics(drill)
    state = processor.weighting.state
    processor.set_calibration("10")
    after = processor.metrics(drill)
    np.testing.assert_array_equal(processor.weighting.state, state)
    assert round(after.db - before.db, 6) == 10.0
    assert processor.calibration_offset == 10.0


def test_invalid_calibration_keeps_previous_value() -> None:
    processor = AudioProcessor(calibration_offset=-20)
    with pytest.raises(InvalidCalibration):
        processor.set_calibration(75)
    assert processor.calibration_offset == -20.0


def test_feed_accepts_frames_by_channels(drill: MachineProfile) -> None:
    processor = AudioProcessor()
    processor.feed(np.zeros((1024, 2), dtype=np.float32))
    assert processor.is_ready
    assert processor.metrics(drill).status is DiagnosticStatus.NORMAL


def test_reset_returns_to_not_ready() -> None:
    processor = _fed_processor()
    processor.reset()
    assert not processor.is_ready
    assert np.all(processor.weighting.state == 0.0)
