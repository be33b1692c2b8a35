from __future__ import annotations

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from acousticdiag.analysis.fft import SpectrumAnalyzer, compute_fft, is_power_of_two
from conftest import BIN_40_HZ, FFT_SIZE, SAMPLE_RATE_HZ, tone


def test_bin_to_hz_is_exact_and_monotonic() -> None:
    analyzer = SpectrumAnalyzer(SAMPLE_RATE_HZ, FFT_SIZE)
    assert analyzer.bin_count == 1024
    assert analyzer.bin_to_hz(0) == 0.0
    assert analyzer.bin_to_hz(5) == 117.1875
    assert analyzer.bin_to_hz(40) == BIN_40_HZ
    freqs = analyzer.bin_frequencies()
    assert freqs.shape == (1024,)
    assert np.all(np.diff(freqs) > 0)
    assert freqs[-1] == analyzer.bin_to_hz(1023)


def test_magnitudes_are_deterministic_bytes() -> None:
    analyzer = SpectrumAnalyzer(SAMPLE_RATE_HZ, FFT_SIZE)
    block = np.random.default_rng(7).normal(0.0, 0.05, FFT_SIZE)
    first = analyzer.magnitudes(block)
    second = analyzer.magnitudes(block)
    assert first.dtype == np.uint8
    assert first.shape == (1024,)
    assert_array_equal(first, second)


def test_silence_maps_to_zero() -> None:
    analyzer = SpectrumAnalyzer(SAMPLE_RATE_HZ, FFT_SIZE)
    assert not analyzer.magnitudes(np.zeros(FFT_SIZE)).any()


def test_bin_centred_tone_peaks_on_its_bin() -> None:
    analyzer = SpectrumAnalyzer(SAMPLE_RATE_HZ, FFT_SIZE)
    mags = analyzer.magnitudes(tone(BIN_40_HZ, 0.02, FFT_SIZE))
    assert int(np.argmax(mags)) == 40
    assert mags[40] > mags[39] > mags[38]
    assert mags[40] > mags[41] > mags[42]
    # 0.02 * 0.42 / 2 -> about -47.5 dBFS -> floor(52.5 * 255 / 70)
    assert mags[40] == 191


def test_loud_tone_saturates_at_255() -> None:
    analyzer = SpectrumAnalyzer(SAMPLE_RATE_HZ, FFT_SIZE)
    mags = analyzer.magnitudes(tone(BIN_40_HZ, 0.5, FFT_SIZE))
    assert mags.max() == 255


@pytest.mark.parametrize("size", [1000, 16, 65536])
def test_fft_size_must_be_supported_power_of_two(size: int) -> None:
    with pytest.raises(ValueError):
        SpectrumAnalyzer(SAMPLE_RATE_HZ, size)


def test_block_length_must_match_fft_size() -> None:
    analyzer = SpectrumAnalyzer(SAMPLE_RATE_HZ, 1024)
    with pytest.raises(ValueError):
        analyzer.magnitudes(np.zeros(2048))


def test_decibel_range_must_be_increasing() -> None:
    with pytest.raises(ValueError):
        SpectrumAnalyzer(SAMPLE_RATE_HZ, FFT_SIZE, min_decibels=-30.0, max_decibels=-100.0)


def test_is_power_of_two() -> None:
    assert is_power_of_two(2048)
    assert not is_power_of_two(0)
    assert not is_power_of_two(3000)


def test_compute_fft_returns_one_sided_bins() -> None:
    freqs, magnitude = compute_fft(np.ones(8), 8.0)
    assert freqs.shape == magnitude.shape == (5,)
    assert magnitude[0] == pytest.approx(8.0)
    with pytest.raises(ValueError):
        compute_fft([], 8.0)


def test_magnitudes_db_normalises_one_sided_fft() -> None:
    analyzer = SpectrumAnalyzer(SAMPLE_RATE_HZ, FFT_SIZE)
    db = analyzer.magnitudes_db(np.ones(FFT_SIZE))
    assert db.shape == (analyzer.bin_count,)
    # periodic Blackman window has a coherent gain of 0.42
    assert db[0] == pytest.approx(20.0 * np.log10(0.42))
