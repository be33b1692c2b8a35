from __future__ import annotations

from datetime import datetime, timezone

import numpy as np
import pytest

from acousticdiag.audio.sources import AudioHandle
from acousticdiag.core.errors import DeviceUnavailable
from acousticdiag.core.models import MachineProfile

SAMPLE_RATE_HZ = 48000.0
FFT_SIZE = 2048


def tone(freq_hz: float, amplitude: float, n_samples: int, *, start: int = 0) -> np.ndarray:
    t = (np.arange(n_samples) + start) / SAMPLE_RATE_HZ
    return amplitude * np.sin(2.0 * np.pi * freq_hz * t)


# 40 * 48000 / 2048 lands exactly on a bin centre.
BIN_40_HZ = 40 * SAMPLE_RATE_HZ / FFT_SIZE


class FakeAudioSource:
    """Synchronous stand-in for a microphone: blocks are pushed by the test."""

    sample_rate_hz = SAMPLE_RATE_HZ

    def __init__(self, initial_blocks=(), *, fail: bool = False) -> None:
        self.initial_blocks = list(initial_blocks)
        self.fail = fail
        self.acquire_count = 0
        self.release_count = 0
        self.consumer = None
        self.handles: list[AudioHandle] = []

    def acquire(self, consumer) -> AudioHandle:
        if self.fail:
            raise DeviceUnavailable("no microphone")
        self.acquire_count += 1
        self.consumer = consumer
        for block in self.initial_blocks:
            consumer(block)
        handle = AudioHandle(source_name="fake")
        self.handles.append(handle)
        return handle

    def release(self, handle: AudioHandle) -> None:
        self.release_count += 1
        handle.released = True
        self.consumer = None

    def push(self, block) -> None:
        assert self.consumer is not None, "source is not acquired"
        self.consumer(block)


def tone_blocks(freq_hz: float = BIN_40_HZ, amplitude: float = 0.02, n_blocks: int = 10, block_size: int = 1024):
    return [tone(freq_hz, amplitude, block_size, start=i * block_size) for i in range(n_blocks)]


@pytest.fixture
def washer() -> MachineProfile:
    return MachineProfile(
        id="m1",
        name="Washing Machine - Spin Cycle",
        category="Home Appliance",
        max_db=72,
        peak_freq_range=(50, 200),
    )


@pytest.fixture
def drill() -> MachineProfile:
    return MachineProfile(
        id="m3",
        name="Pneumatic Drill (Stationary)",
        category="Construction",
        max_db=105,
        peak_freq_range=(800, 2000),
    )


@pytest.fixture
def fixed_clock():
    stamp = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    return lambda: stamp
