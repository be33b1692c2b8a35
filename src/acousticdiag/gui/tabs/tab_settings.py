from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
from PySide6.QtCore import Signal, Slot
from PySide6.QtWidgets import (
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QLabel,
    QVBoxLayout,
    QWidget,
)

from ...analysis.filters import AWeightingFilter
from ...core.calibration import CALIBRATION_MAX_DB, CALIBRATION_MIN_DB, CALIBRATION_STEP_DB

RESPONSE_PROBE_HZ = (31.5, 100.0, 1000.0, 4000.0, 10000.0)


class SettingsTab(QWidget):
    """Calibration offset editor plus a read-out of the weighting curve."""

    calibration_requested = Signal(float)

    def __init__(
        self,
        sample_rate_hz: float = 48000.0,
        parent: Optional[QWidget] = None,
        *,
        probe_hz: Sequence[float] = RESPONSE_PROBE_HZ,
    ) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)

        calibration_box = QGroupBox("Calibration", self)
        form = QFormLayout(calibration_box)
        self._offset_spin = QDoubleSpinBox(calibration_box)
        self._offset_spin.setRange(CALIBRATION_MIN_DB, CALIBRATION_MAX_DB)
        self._offset_spin.setSingleStep(CALIBRATION_STEP_DB)
        self._offset_spin.setDecimals(1)
        self._offset_spin.setSuffix(" dB")
        self._offset_spin.setKeyboardTracking(False)
        form.addRow("Offset:", self._offset_spin)
        form.addRow(
            QLabel(
                "Added to every level reading. Adjust against a reference meter.",
                calibration_box,
            )
        )
        layout.addWidget(calibration_box)

        response_box = QGroupBox("A-weighting response", self)
        response_form = QFormLayout(response_box)
        weighting = AWeightingFilter(sample_rate_hz)
        gains = weighting.response_db(np.asarray(probe_hz, dtype=float))
        for freq, gain in zip(probe_hz, gains):
            response_form.addRow(f"{freq:g} Hz:", QLabel(f"{gain:+.1f} dB", response_box))
        layout.addWidget(response_box)
        layout.addStretch(1)

        self._offset_spin.valueChanged.connect(self._on_value_changed)

    @Slot(float)
    def set_calibration(self, value: float) -> None:
        was_blocked = self._offset_spin.blockSignals(True)
        self._offset_spin.setValue(float(value))
        self._offset_spin.blockSignals(was_blocked)

    @Slot(float)
    def _on_value_changed(self, value: float) -> None:
        self.calibration_requested.emit(float(value))
