from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

from PySide6.QtCore import QObject, Qt, QTimer, Signal, Slot

from ..config.runtime import DiagConfig
from ..core.errors import DeviceUnavailable, InvalidCalibration, SessionError
from ..core.models import HistoryRecord, MachineProfile
from ..core.session import DiagnosticSession, SessionState
from ..dataio.csv_writer import export_history_csv
from ..dataio.history import HistoryStore
from ..dataio.settings import SettingsStore
from ..tools.debug import time_block

logger = logging.getLogger(__name__)

MICROPHONE_REQUIRED_MESSAGE = "Microphone access is required for acoustic diagnostics."


class SessionController(QObject):
    """
    Non-visual controller that runs :class:`DiagnosticSession` on Qt timers.

    A refresh timer (display cadence) polls metrics and a one-second timer
    drives the countdown; both fire on the GUI thread, so the session only
    ever sees one call at a time.
    """

    machine_changed = Signal(object)
    state_changed = Signal(object)
    metrics_updated = Signal(object)
    spectrum_updated = Signal(object)
    countdown_changed = Signal(object)
    record_created = Signal(object)
    history_changed = Signal(object)
    calibration_changed = Signal(float)
    error_reported = Signal(str)

    def __init__(
        self,
        audio_source,
        *,
        history_store: HistoryStore,
        settings_store: SettingsStore,
        config: DiagConfig | None = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._config = (config or DiagConfig()).sanitized()
        self._history_store = history_store
        self._settings_store = settings_store
        self._session = DiagnosticSession(
            audio_source,
            config=self._config,
            calibration_offset=settings_store.load_calibration(),
            record_sink=self._on_record,
        )

        self._refresh_timer = QTimer(self)
        self._refresh_timer.setTimerType(Qt.PreciseTimer)
        self._refresh_timer.setInterval(self._config.refresh_interval_ms())
        self._refresh_timer.timeout.connect(self._on_refresh)

        self._countdown_timer = QTimer(self)
        self._countdown_timer.setTimerType(Qt.PreciseTimer)
        self._countdown_timer.setInterval(1000)
        self._countdown_timer.timeout.connect(self._on_countdown)

    # --------------------------------------------------------------- accessors
    @property
    def session(self) -> DiagnosticSession:
        return self._session

    @property
    def config(self) -> DiagConfig:
        return self._config

    def history(self) -> List[HistoryRecord]:
        return self._history_store.load_history()

    def calibration_offset(self) -> float:
        return self._session.calibration_offset

    def timers_active(self) -> bool:
        return self._refresh_timer.isActive() or self._countdown_timer.isActive()

    # --------------------------------------------------------------- commands
    @Slot(object)
    def select_machine(self, profile: MachineProfile) -> None:
        try:
            self._session.select_machine(profile)
        except SessionError as exc:
            self._emit_error(str(exc))
            return
        self.machine_changed.emit(profile)
        self._emit_state()

    @Slot()
    def start(self) -> bool:
        try:
            self._session.start()
        except DeviceUnavailable as exc:
            logger.warning("Start rejected: %s", exc)
            self._emit_error(MICROPHONE_REQUIRED_MESSAGE)
            return False
        except SessionError as exc:
            self._emit_error(str(exc))
            return False

        self._emit_state()
        self.countdown_changed.emit(self._session.countdown)
        self._on_refresh()
        self._refresh_timer.start()
        self._countdown_timer.start()
        return True

    @Slot()
    def stop(self) -> Optional[HistoryRecord]:
        self._stop_timers()
        record = self._session.stop()
        if record is not None:
            self._emit_state()
            self.countdown_changed.emit(None)
        return record

    @Slot()
    def reset(self) -> Optional[HistoryRecord]:
        self._stop_timers()
        record = self._session.reset()
        self.machine_changed.emit(None)
        self.countdown_changed.emit(None)
        self.metrics_updated.emit(self._session.metrics)
        self.spectrum_updated.emit(self._session.spectrum)
        self._emit_state()
        return record

    @Slot(object)
    def set_calibration(self, value: Any) -> bool:
        try:
            offset = self._session.set_calibration(value)
        except InvalidCalibration as exc:
            self._emit_error(str(exc))
            self.calibration_changed.emit(self._session.calibration_offset)
            return False
        try:
            self._settings_store.save_calibration(offset)
        except OSError:
            logger.exception("Failed to persist calibration offset")
            self._emit_error("Calibration applied but could not be saved.")
        self.calibration_changed.emit(offset)
        return True

    @Slot()
    def clear_history(self) -> None:
        try:
            self._history_store.clear_history()
        except OSError:
            logger.exception("Failed to clear history")
            self._emit_error("Could not clear the diagnostic log.")
            return
        self.history_changed.emit([])

    @Slot(str)
    def export_history(self, path: str) -> bool:
        records = self._history_store.load_history()
        try:
            export_history_csv(records, Path(path))
        except OSError:
            logger.exception("Failed to export history to %s", path)
            self._emit_error(f"Could not export the diagnostic log to {path}.")
            return False
        logger.info("Exported %d history records to %s", len(records), path)
        return True

    # --------------------------------------------------------------- timers
    @Slot()
    def _on_refresh(self) -> None:
        if not self._session.is_running:
            return
        with time_block("metrics poll", budget_ms=self._refresh_timer.interval()):
            metrics = self._session.poll()
        self.metrics_updated.emit(metrics)
        self.spectrum_updated.emit(self._session.spectrum)

    @Slot()
    def _on_countdown(self) -> None:
        if not self._session.is_running:
            self._stop_timers()
            return
        self._session.tick()
        if self._session.is_running:
            self.countdown_changed.emit(self._session.countdown)
            return
        self._stop_timers()
        self.countdown_changed.emit(None)
        self._emit_state()

    def _stop_timers(self) -> None:
        self._refresh_timer.stop()
        self._countdown_timer.stop()

    # --------------------------------------------------------------- sinks
    def _on_record(self, record: HistoryRecord) -> None:
        self.record_created.emit(record)
        try:
            history = self._history_store.append_history(record)
        except OSError:
            logger.exception("Failed to append history record %s", record.id)
            self._emit_error("The diagnostic result could not be saved to the log.")
            return
        self.history_changed.emit(history)

    def _emit_state(self) -> None:
        state: SessionState = self._session.state
        self.state_changed.emit(state)

    def _emit_error(self, message: str) -> None:
        logger.error("SessionController error: %s", message)
        self.error_reported.emit(str(message))


__all__ = ["SessionController", "MICROPHONE_REQUIRED_MESSAGE"]
