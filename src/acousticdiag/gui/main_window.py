"""Main window for the AcousticDiag GUI."""

from __future__ import annotations

import logging
from typing import Sequence

from PySide6.QtCore import Slot
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QMainWindow,
    QMessageBox,
    QStackedWidget,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from ..core.models import MachineProfile
from .session_controller import SessionController
from .tabs.tab_diagnostic import DiagnosticPanel
from .tabs.tab_history import HistoryTab
from .tabs.tab_machines import MachinesTab
from .tabs.tab_settings import SettingsTab


class MainWindow(QMainWindow):
    """
    Top-level window: machines/measurement, log, and settings tabs.

    The first tab stacks the machine list and the measurement panel; picking
    a machine flips to the panel and going back resets the session.
    """

    def __init__(
        self,
        controller: SessionController,
        catalog: Sequence[MachineProfile],
    ) -> None:
        super().__init__()
        self.setWindowTitle("AcousticDiag")
        self._controller = controller
        self._logger = logging.getLogger(__name__)
        self._tabs = QTabWidget()

        self._build_tabs(catalog)
        self.history_tab.set_history(controller.history())
        self.settings_tab.set_calibration(controller.calibration_offset())

    def closeEvent(self, event: QCloseEvent) -> None:
        # A window closed mid-measurement still logs its result.
        self._controller.stop()
        super().closeEvent(event)

    def _build_tabs(self, catalog: Sequence[MachineProfile]) -> None:
        controller = self._controller

        self.machines_tab = MachinesTab(catalog)
        self.diagnostic_panel = DiagnosticPanel()
        self.history_tab = HistoryTab()
        self.settings_tab = SettingsTab(controller.config.sample_rate_hz)

        self._stack = QStackedWidget()
        self._stack.addWidget(self.machines_tab)
        self._stack.addWidget(self.diagnostic_panel)

        self.machines_tab.machine_selected.connect(controller.select_machine)
        controller.machine_changed.connect(self._on_machine_changed)
        controller.machine_changed.connect(self.diagnostic_panel.set_machine)
        controller.state_changed.connect(self.diagnostic_panel.update_state)
        controller.metrics_updated.connect(self.diagnostic_panel.update_metrics)
        controller.spectrum_updated.connect(self.diagnostic_panel.update_spectrum)
        controller.countdown_changed.connect(self.diagnostic_panel.update_countdown)
        controller.history_changed.connect(self.history_tab.set_history)
        controller.calibration_changed.connect(self.settings_tab.set_calibration)
        controller.error_reported.connect(self._on_error_reported)

        self.diagnostic_panel.start_requested.connect(controller.start)
        self.diagnostic_panel.stop_requested.connect(controller.stop)
        self.diagnostic_panel.back_requested.connect(controller.reset)

        self.history_tab.clear_requested.connect(controller.clear_history)
        self.history_tab.export_requested.connect(controller.export_history)
        self.settings_tab.calibration_requested.connect(controller.set_calibration)

        self._tabs.addTab(self._stack, self.tr("Machines"))
        self._tabs.addTab(self.history_tab, self.tr("Log"))
        self._tabs.addTab(self.settings_tab, self.tr("Settings"))

        container = QWidget()
        layout = QVBoxLayout(container)
        layout.addWidget(self._tabs)
        self.setCentralWidget(container)

    @Slot(object)
    def _on_machine_changed(self, profile: MachineProfile | None) -> None:
        self._stack.setCurrentWidget(
            self.diagnostic_panel if profile is not None else self.machines_tab
        )

    @Slot(str)
    def _on_error_reported(self, message: str) -> None:
        self._logger.debug("Showing error dialog: %s", message)
        QMessageBox.warning(self, self.tr("AcousticDiag"), message)
