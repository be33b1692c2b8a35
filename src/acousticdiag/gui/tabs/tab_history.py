from __future__ import annotations

from typing import Optional, Sequence

from PySide6.QtCore import Signal, Slot
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QMessageBox,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ...core.models import DiagnosticStatus, HistoryRecord

_COLUMNS = ("Time", "Machine", "Level (dB)", "Peak (Hz)", "Status")


class HistoryTab(QWidget):
    """Most-recent-first log of diagnostic results."""

    clear_requested = Signal()
    export_requested = Signal(str)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._records: list[HistoryRecord] = []

        layout = QVBoxLayout(self)

        self._table = QTableWidget(0, len(_COLUMNS), self)
        self._table.setHorizontalHeaderLabels(list(_COLUMNS))
        self._table.setEditTriggers(QTableWidget.NoEditTriggers)
        self._table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self._table.verticalHeader().setVisible(False)
        layout.addWidget(self._table, stretch=1)

        controls = QHBoxLayout()
        self._summary_label = QLabel("", self)
        self._export_button = QPushButton("Export CSV...", self)
        self._clear_button = QPushButton("Clear log", self)
        controls.addWidget(self._summary_label, stretch=1)
        controls.addWidget(self._export_button)
        controls.addWidget(self._clear_button)
        layout.addLayout(controls)

        self._export_button.clicked.connect(self._on_export_clicked)
        self._clear_button.clicked.connect(self._on_clear_clicked)
        self.set_history([])

    @Slot(object)
    def set_history(self, records: Sequence[HistoryRecord]) -> None:
        self._records = list(records)
        self._table.setRowCount(len(self._records))
        for row, record in enumerate(self._records):
            local_time = record.created_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
            values = (
                local_time,
                record.machine_name,
                f"{record.db:.1f}",
                str(record.peak_frequency),
                record.status.value,
            )
            for col, value in enumerate(values):
                self._table.setItem(row, col, QTableWidgetItem(value))
        abnormal = sum(1 for r in self._records if r.status is DiagnosticStatus.ABNORMAL)
        if self._records:
            self._summary_label.setText(f"{len(self._records)} results, {abnormal} abnormal")
        else:
            self._summary_label.setText("No diagnostics recorded yet.")
        self._clear_button.setEnabled(bool(self._records))
        self._export_button.setEnabled(bool(self._records))

    @Slot()
    def _on_clear_clicked(self) -> None:
        answer = QMessageBox.question(
            self,
            "Clear log",
            "Delete all diagnostic results?",
            QMessageBox.Yes | QMessageBox.No,
            QMessageBox.No,
        )
        if answer == QMessageBox.Yes:
            self.clear_requested.emit()

    @Slot()
    def _on_export_clicked(self) -> None:
        path, _ = QFileDialog.getSaveFileName(
            self, "Export diagnostic log", "diagnostics.csv", "CSV files (*.csv)"
        )
        if path:
            self.export_requested.emit(path)
