from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QFrame, QHBoxLayout, QLabel, QVBoxLayout, QWidget

_NORMAL_STYLE = "font-size: 22pt; font-weight: bold;"
_ALERT_STYLE = _NORMAL_STYLE + " color: #e5484d;"


class MetricCard(QFrame):
    """Label/value/unit tile used on the measurement panel."""

    def __init__(self, label: str, unit: str = "", parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setFrameShape(QFrame.StyledPanel)

        self._label = QLabel(label.upper(), self)
        self._label.setStyleSheet("color: gray; font-size: 8pt; font-weight: bold;")
        self._value = QLabel("0", self)
        self._value.setStyleSheet(_NORMAL_STYLE)
        self._unit = QLabel(unit, self)
        self._unit.setStyleSheet("color: gray;")

        value_row = QHBoxLayout()
        value_row.addWidget(self._value)
        value_row.addWidget(self._unit, alignment=Qt.AlignBottom)
        value_row.addStretch(1)

        layout = QVBoxLayout(self)
        layout.addWidget(self._label)
        layout.addLayout(value_row)

    def set_value(self, value) -> None:
        self._value.setText(str(value))

    def set_alert(self, alert: bool) -> None:
        self._value.setStyleSheet(_ALERT_STYLE if alert else _NORMAL_STYLE)
