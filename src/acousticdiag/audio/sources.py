"""Audio sources that feed raw sample blocks into a session's processor."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

import numpy as np

from ..core.errors import DeviceUnavailable

logger = logging.getLogger(__name__)

BlockConsumer = Callable[[np.ndarray], None]


def _load_sounddevice():
    """Import sounddevice on first use; a missing PortAudio library means no device."""
    try:
        import sounddevice
    except OSError as exc:
        raise DeviceUnavailable(f"PortAudio is not available: {exc}") from exc
    return sounddevice


@dataclass(eq=False)
class AudioHandle:
    """Opaque token returned by :meth:`AudioSource.acquire`."""

    source_name: str
    stream: Any = None
    released: bool = False
    _stop_event: threading.Event = field(default_factory=threading.Event, repr=False)
    _thread: Optional[threading.Thread] = field(default=None, repr=False)


class AudioSource(Protocol):
    """Interface of the audio collaborator used by :class:`DiagnosticSession`."""

    sample_rate_hz: float

    def acquire(self, consumer: BlockConsumer) -> AudioHandle:  # pragma: no cover - protocol
        """Start delivering blocks to ``consumer``; raise :class:`DeviceUnavailable` on failure."""
        ...

    def release(self, handle: AudioHandle) -> None:  # pragma: no cover - protocol
        ...


class SoundDeviceSource:
    """Microphone input through a PortAudio ``InputStream``."""

    def __init__(
        self,
        sample_rate_hz: float = 48000.0,
        *,
        block_size: int = 1024,
        device: int | str | None = None,
    ) -> None:
        self.sample_rate_hz = float(sample_rate_hz)
        self.block_size = int(block_size)
        self.device = device

    def acquire(self, consumer: BlockConsumer) -> AudioHandle:
        sd = _load_sounddevice()

        def _callback(indata, frames, time_info, status) -> None:
            if status:
                logger.warning("Audio input status: %s", status)
            try:
                consumer(indata[:, 0].copy())
            except Exception:  # pragma: no cover - keep the PortAudio thread alive
                logger.exception("Audio consumer failed")

        try:
            stream = sd.InputStream(
                device=self.device,
                channels=1,
                samplerate=self.sample_rate_hz,
                blocksize=self.block_size,
                dtype="float32",
                callback=_callback,
            )
            stream.start()
        except (sd.PortAudioError, OSError, ValueError) as exc:
            logger.error("Could not open audio input %r: %s", self.device, exc)
            raise DeviceUnavailable(f"Microphone access failed: {exc}") from exc

        logger.info(
            "Audio input opened (device=%r, %.0f Hz, block=%d)",
            self.device,
            self.sample_rate_hz,
            self.block_size,
        )
        return AudioHandle(source_name="sounddevice", stream=stream)

    def release(self, handle: AudioHandle) -> None:
        if handle.released:
            return
        handle.released = True
        stream = handle.stream
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()
        logger.info("Audio input released")


class SyntheticSource:
    """
    Background generator producing a tone plus seeded noise in real time.

    Used when no microphone is available (demo mode, headless smoke runs).
    """

    def __init__(
        self,
        sample_rate_hz: float = 48000.0,
        *,
        block_size: int = 1024,
        tone_hz: float = 120.0,
        amplitude: float = 0.05,
        noise: float = 0.005,
        seed: int | None = 0,
        realtime: bool = True,
    ) -> None:
        self.sample_rate_hz = float(sample_rate_hz)
        self.block_size = int(block_size)
        self.tone_hz = float(tone_hz)
        self.amplitude = float(amplitude)
        self.noise = float(noise)
        self.seed = seed
        self.realtime = realtime

    def generate(self, n_blocks: int, *, start_sample: int = 0, rng: np.random.Generator | None = None) -> list[np.ndarray]:
        """Return ``n_blocks`` consecutive blocks (used by the generator thread and tests)."""
        rng = rng or np.random.default_rng(self.seed)
        blocks = []
        idx = start_sample
        for _ in range(n_blocks):
            t = (np.arange(self.block_size) + idx) / self.sample_rate_hz
            block = self.amplitude * np.sin(2.0 * np.pi * self.tone_hz * t)
            if self.noise > 0:
                block = block + rng.normal(0.0, self.noise, self.block_size)
            blocks.append(block.astype(np.float32))
            idx += self.block_size
        return blocks

    def acquire(self, consumer: BlockConsumer) -> AudioHandle:
        handle = AudioHandle(source_name="synthetic")
        period_s = self.block_size / self.sample_rate_hz

        def _run() -> None:
            rng = np.random.default_rng(self.seed)
            sample_index = 0
            next_deadline = time.monotonic()
            while not handle._stop_event.is_set():
                (block,) = self.generate(1, start_sample=sample_index, rng=rng)
                sample_index += self.block_size
                try:
                    consumer(block)
                except Exception:  # pragma: no cover - mirrors the device callback
                    logger.exception("Audio consumer failed")
                if self.realtime:
                    next_deadline += period_s
                    handle._stop_event.wait(max(0.0, next_deadline - time.monotonic()))

        thread = threading.Thread(target=_run, name="synthetic-audio", daemon=True)
        handle._thread = thread
        thread.start()
        logger.info("Synthetic audio started (%.1f Hz tone)", self.tone_hz)
        return handle

    def release(self, handle: AudioHandle) -> None:
        if handle.released:
            return
        handle.released = True
        handle._stop_event.set()
        if handle._thread is not None:
            handle._thread.join(timeout=1.0)
        logger.info("Synthetic audio stopped")


__all__ = ["AudioHandle", "AudioSource", "BlockConsumer", "SoundDeviceSource", "SyntheticSource"]
