from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Signal, Slot
from PySide6.QtWidgets import (
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ...core.models import DiagnosticStatus, MachineProfile, Metrics
from ...core.session import SessionState
from ..widgets import MetricCard, SpectrumBarsWidget

_STATUS_STYLES = {
    DiagnosticStatus.IDLE: "color: gray;",
    DiagnosticStatus.NORMAL: "color: #30a46c; font-weight: bold;",
    DiagnosticStatus.ABNORMAL: "color: #e5484d; font-weight: bold;",
}


class DiagnosticPanel(QWidget):
    """
    Measurement view for the armed machine.

    Shows the live level, dominant frequency and stability while a session
    runs, the spectrum bars, the machine's thresholds, and the countdown.
    After the window ends the last values stay on screen next to the
    restart and back buttons.
    """

    start_requested = Signal()
    stop_requested = Signal()
    back_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._machine: MachineProfile | None = None

        layout = QVBoxLayout(self)

        header = QHBoxLayout()
        self._back_button = QPushButton("Change machine", self)
        self._title_label = QLabel("", self)
        self._title_label.setStyleSheet("font-size: 14pt; font-weight: bold;")
        self._countdown_label = QLabel("", self)
        header.addWidget(self._back_button)
        header.addWidget(self._title_label, stretch=1)
        header.addWidget(self._countdown_label)
        layout.addLayout(header)

        self._status_label = QLabel("", self)
        layout.addWidget(self._status_label)

        cards = QHBoxLayout()
        self._db_card = MetricCard("Level", "dB(A)", self)
        self._freq_card = MetricCard("Peak frequency", "Hz", self)
        cards.addWidget(self._db_card)
        cards.addWidget(self._freq_card)
        layout.addLayout(cards)

        self._stability_label = QLabel("", self)
        layout.addWidget(self._stability_label)

        self._spectrum = SpectrumBarsWidget(self)
        self._spectrum.setMinimumHeight(140)
        layout.addWidget(self._spectrum, stretch=1)

        limits = QGroupBox("Thresholds", self)
        limits_layout = QGridLayout(limits)
        limits_layout.addWidget(QLabel("Max level:", limits), 0, 0)
        self._max_db_label = QLabel("", limits)
        limits_layout.addWidget(self._max_db_label, 0, 1)
        limits_layout.addWidget(QLabel("Peak frequency range:", limits), 1, 0)
        self._range_label = QLabel("", limits)
        limits_layout.addWidget(self._range_label, 1, 1)
        layout.addWidget(limits)

        buttons = QHBoxLayout()
        self._start_button = QPushButton("Start diagnostic", self)
        self._stop_button = QPushButton("Stop", self)
        self._menu_button = QPushButton("Back to menu", self)
        buttons.addWidget(self._start_button)
        buttons.addWidget(self._stop_button)
        buttons.addWidget(self._menu_button)
        layout.addLayout(buttons)

        self._start_button.clicked.connect(self.start_requested)
        self._stop_button.clicked.connect(self.stop_requested)
        self._back_button.clicked.connect(self.back_requested)
        self._menu_button.clicked.connect(self.back_requested)

        self.update_metrics(Metrics.idle())
        self.update_state(SessionState.IDLE)

    # --------------------------------------------------------------- slots
    @Slot(object)
    def set_machine(self, profile: MachineProfile | None) -> None:
        self._machine = profile
        if profile is None:
            self._title_label.setText("")
            self._max_db_label.setText("")
            self._range_label.setText("")
            return
        self._title_label.setText(f"{profile.name} ({profile.category})")
        self._max_db_label.setText(f"{profile.max_db:g} dB")
        self._range_label.setText(f"{profile.peak_freq_low:g} - {profile.peak_freq_high:g} Hz")
        self._spectrum.clear()
        self.update_metrics(Metrics.idle())

    @Slot(object)
    def update_metrics(self, metrics: Metrics) -> None:
        self._db_card.set_value(f"{metrics.db:.1f}")
        self._freq_card.set_value(str(int(metrics.peak_frequency)))
        self._status_label.setText(f"Status: {metrics.status.value}")
        self._status_label.setStyleSheet(_STATUS_STYLES.get(metrics.status, ""))
        machine = self._machine
        self._db_card.set_alert(machine is not None and metrics.db > machine.max_db)
        self._stability_label.setText("Signal stable" if metrics.is_stable else "Signal unstable")

    @Slot(object)
    def update_spectrum(self, magnitudes) -> None:
        self._spectrum.set_spectrum(magnitudes)

    @Slot(object)
    def update_countdown(self, countdown: int | None) -> None:
        self._countdown_label.setText("" if countdown is None else f"{int(countdown)} s")

    @Slot(object)
    def update_state(self, state: SessionState) -> None:
        running = state is SessionState.RUNNING
        self._start_button.setText("Restart diagnostic" if state is SessionState.FINISHED else "Start diagnostic")
        self._start_button.setEnabled(not running and self._machine is not None)
        self._stop_button.setEnabled(running)
        self._back_button.setEnabled(not running)
        self._menu_button.setVisible(state is SessionState.FINISHED)
