from __future__ import annotations

import threading
import types

import numpy as np
import pytest
from numpy.testing import assert_array_equal

from acousticdiag.audio import sources
from acousticdiag.audio.sources import SoundDeviceSource, SyntheticSource
from acousticdiag.core.errors import DeviceUnavailable


def test_synthetic_generate_is_seeded_and_continuous() -> None:
    src = SyntheticSource(48000.0, block_size=256, tone_hz=1000.0, noise=0.0, seed=1)
    blocks = src.generate(3)
    assert [b.shape for b in blocks] == [(256,)] * 3
    assert blocks[0].dtype == np.float32
    (second,) = src.generate(1, start_sample=256)
    assert_array_equal(second, blocks[1])

    noisy = SyntheticSource(48000.0, block_size=256, seed=5)
    assert_array_equal(noisy.generate(2)[1], noisy.generate(2)[1])


def test_synthetic_acquire_delivers_blocks_until_released() -> None:
    src = SyntheticSource(48000.0, block_size=128, realtime=False)
    received = []
    enough = threading.Event()

    def consumer(block) -> None:
        received.append(block)
        if len(received) >= 3:
            enough.set()

    handle = src.acquire(consumer)
    assert enough.wait(timeout=5.0)
    src.release(handle)
    src.release(handle)
    assert handle.released
    assert not handle._thread.is_alive()


class _FakeStream:
    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.calls = []

    def start(self) -> None:
        self.calls.append("start")

    def stop(self) -> None:
        self.calls.append("stop")

    def close(self) -> None:
        self.calls.append("close")


def _fake_sounddevice(stream_factory):
    class PortAudioError(Exception):
        pass

    return types.SimpleNamespace(InputStream=stream_factory, PortAudioError=PortAudioError)


def test_sounddevice_source_opens_mono_stream_and_releases_once(monkeypatch) -> None:
    streams = []

    def factory(**kwargs):
        stream = _FakeStream(**kwargs)
        streams.append(stream)
        return stream

    monkeypatch.setattr(sources, "_load_sounddevice", lambda: _fake_sounddevice(factory))
    received = []
    src = SoundDeviceSource(48000.0, block_size=512)
    handle = src.acquire(received.append)

    (stream,) = streams
    assert stream.kwargs["channels"] == 1
    assert stream.kwargs["blocksize"] == 512
    assert stream.kwargs["samplerate"] == 48000.0
    stream.kwargs["callback"](np.ones((512, 1), dtype=np.float32), 512, None, None)
    assert received[0].shape == (512,)

    src.release(handle)
    src.release(handle)
    assert stream.calls == ["start", "stop", "close"]


def test_sounddevice_failure_becomes_device_unavailable(monkeypatch) -> None:
    fake = None

    def factory(**kwargs):
        raise fake.PortAudioError("Error querying device -1")

    fake = _fake_sounddevice(factory)
    monkeypatch.setattr(sources, "_load_sounddevice", lambda: fake)
    with pytest.raises(DeviceUnavailable):
        SoundDeviceSource().acquire(lambda block: None)
