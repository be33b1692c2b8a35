"""Timed diagnostic session: arm, sample for a fixed window, record one verdict."""

from __future__ import annotations

import enum
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional

import numpy as np

from ..config.runtime import DiagConfig
from .calibration import DEFAULT_CALIBRATION_OFFSET, parse_calibration
from .errors import DeviceUnavailable, SessionError
from .models import HistoryRecord, MachineProfile, Metrics
from .processor import AudioProcessor

logger = logging.getLogger(__name__)

RecordSink = Callable[[HistoryRecord], Any]


class SessionState(enum.Enum):
    IDLE = "idle"
    ARMED = "armed"
    RUNNING = "running"
    FINISHED = "finished"


class DiagnosticSession:
    """
    State machine driving one machine's diagnostic window.

    ``IDLE -> ARMED -> RUNNING -> FINISHED``; :meth:`reset` returns to
    ``IDLE`` from anywhere. Two external cadences drive a running session:
    :meth:`poll` at display-refresh rate publishes metrics, :meth:`tick` once
    per second counts down. Every ``RUNNING`` episode ends through
    :meth:`stop`, which releases the audio source and then emits exactly one
    :class:`HistoryRecord` built from the last published metrics.
    """

    def __init__(
        self,
        audio_source,
        *,
        config: DiagConfig | None = None,
        calibration_offset: Any = DEFAULT_CALIBRATION_OFFSET,
        record_sink: Optional[RecordSink] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._source = audio_source
        self.config = (config or DiagConfig()).sanitized()
        self._calibration_offset = parse_calibration(calibration_offset)
        self._record_sink = record_sink
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self._state = SessionState.IDLE
        self._machine: Optional[MachineProfile] = None
        self._processor: Optional[AudioProcessor] = None
        self._handle = None
        self._countdown: Optional[int] = None
        self._metrics = Metrics.idle()
        self._spectrum = np.zeros(0, dtype=np.uint8)

    # ------------------------------------------------------------------ state
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def machine(self) -> Optional[MachineProfile]:
        return self._machine

    @property
    def metrics(self) -> Metrics:
        return self._metrics

    @property
    def spectrum(self) -> np.ndarray:
        return self._spectrum.copy()

    @property
    def countdown(self) -> Optional[int]:
        return self._countdown

    @property
    def is_running(self) -> bool:
        return self._state is SessionState.RUNNING

    @property
    def calibration_offset(self) -> float:
        return self._calibration_offset

    # ------------------------------------------------------------------ transitions
    def select_machine(self, profile: MachineProfile) -> None:
        if self.is_running:
            raise SessionError("Stop the running diagnostic before changing machine.")
        self._machine = profile
        self._clear_display()
        self._state = SessionState.ARMED
        logger.info("Machine selected: %s (%s)", profile.name, profile.id)

    def start(self) -> None:
        """
        Acquire the audio source and open a new diagnostic window.

        Raises :class:`DeviceUnavailable` (state unchanged, nothing recorded)
        when the source cannot be acquired.
        """
        if self._machine is None:
            raise SessionError("Select a machine before starting a diagnostic.")
        if self.is_running:
            # Never hold two acquisitions at once.
            self.stop()

        processor = AudioProcessor(self.config, self._calibration_offset)
        try:
            handle = self._source.acquire(processor.feed)
        except DeviceUnavailable:
            logger.warning("Diagnostic for %s not started: audio source unavailable", self._machine.id)
            raise

        self._processor = processor
        self._handle = handle
        self._clear_display()
        self._countdown = int(self.config.diagnostic_window_s)
        self._state = SessionState.RUNNING
        logger.info(
            "Diagnostic started for %s (%d s window, calibration %.1f dB)",
            self._machine.id,
            self._countdown,
            self._calibration_offset,
        )

    def poll(self) -> Metrics:
        """Publish one metrics snapshot from the live pipeline (display cadence)."""
        if not self.is_running or self._processor is None or self._machine is None:
            return self._metrics
        metrics, spectrum = self._processor.snapshot(self._machine)
        self._metrics = metrics
        self._spectrum = spectrum
        return metrics

    def tick(self) -> Optional[HistoryRecord]:
        """
        Advance the countdown by one second.

        Returns the terminal record when the window expired on this tick.
        """
        if not self.is_running or self._countdown is None:
            return None
        self._countdown = max(0, self._countdown - 1)
        if self._countdown == 0:
            logger.info("Diagnostic window elapsed")
            return self.stop()
        return None

    def stop(self) -> Optional[HistoryRecord]:
        """
        Terminate the running episode; a no-op unless ``RUNNING``.

        The audio source is released before the record is built, and the
        record uses the metrics published before this call. A source that
        fails to release is logged; the episode still finishes.
        """
        if not self.is_running:
            return None

        handle, self._handle = self._handle, None
        self._processor = None
        self._countdown = None
        self._state = SessionState.FINISHED
        if handle is not None:
            try:
                self._source.release(handle)
            except Exception:
                logger.exception("Failed to release audio source")
        return self._emit_record()

    def _emit_record(self) -> HistoryRecord:
        machine = self._machine
        assert machine is not None
        record = HistoryRecord.from_session(machine, self._metrics, created_at=self._clock())
        logger.info(
            "Diagnostic finished for %s: %s (%.1f dB, %d Hz)",
            machine.id,
            record.status.value,
            record.db,
            record.peak_frequency,
        )
        if self._record_sink is not None:
            self._record_sink(record)
        return record

    def reset(self) -> Optional[HistoryRecord]:
        """Return to ``IDLE``, terminating (and recording) a running episode first."""
        record = self.stop()
        self._machine = None
        self._clear_display()
        self._state = SessionState.IDLE
        return record

    # ------------------------------------------------------------------ settings
    def set_calibration(self, value: Any) -> float:
        """
        Validate and apply a calibration offset.

        Raises :class:`InvalidCalibration` and keeps the previous value when
        ``value`` is rejected. A live processor picks the new value up on the
        next poll without touching its filter state.
        """
        offset = parse_calibration(value)
        self._calibration_offset = offset
        if self._processor is not None:
            self._processor.set_calibration(offset)
        return offset

    # ------------------------------------------------------------------ helpers
    def _clear_display(self) -> None:
        self._metrics = Metrics.idle()
        self._spectrum = np.zeros(0, dtype=np.uint8)


__all__ = ["DiagnosticSession", "RecordSink", "SessionState"]
