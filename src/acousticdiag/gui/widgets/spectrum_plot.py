from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pyqtgraph as pg
from PySide6.QtWidgets import QVBoxLayout, QWidget

MAGNITUDE_FULL_SCALE = 255


def pool_bars(magnitudes: Sequence[int], bar_count: int, display_fraction: float = 0.4) -> np.ndarray:
    """
    Reduce a byte spectrum to ``bar_count`` bars using max pooling.

    Only the lowest ``display_fraction`` of bins is drawn; the upper bins of
    an A-weighted machine recording are rarely informative.
    """
    data = np.asarray(magnitudes, dtype=float).reshape(-1)
    if data.size == 0 or bar_count <= 0:
        return np.zeros(0, dtype=float)
    visible = max(1, int(round(data.size * min(1.0, max(0.0, display_fraction)))))
    data = data[:visible]
    bars = min(bar_count, data.size)
    edges = np.linspace(0, data.size, bars + 1).astype(int)
    return np.array([data[lo:hi].max() for lo, hi in zip(edges[:-1], edges[1:])], dtype=float)


class SpectrumBarsWidget(QWidget):
    """Bar rendering of the latest byte-scaled spectrum."""

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        *,
        bar_count: int = 96,
        display_fraction: float = 0.4,
    ) -> None:
        super().__init__(parent)
        self._bar_count = int(bar_count)
        self._display_fraction = float(display_fraction)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self._plot = pg.PlotWidget(self)
        self._plot.setMenuEnabled(False)
        self._plot.hideButtons()
        self._plot.setMouseEnabled(x=False, y=False)
        self._plot.showGrid(x=False, y=True, alpha=0.2)
        self._plot.setYRange(0, MAGNITUDE_FULL_SCALE, padding=0.0)
        self._plot.setXRange(0, self._bar_count, padding=0.0)
        self._plot.getAxis("bottom").setStyle(showValues=False)
        self._plot.setTitle("FFT analysis")
        layout.addWidget(self._plot)

        self._bars = pg.BarGraphItem(x=[], height=[], width=0.8, brush=pg.mkBrush(80, 200, 120))
        self._plot.addItem(self._bars)

    def set_spectrum(self, magnitudes: Sequence[int]) -> None:
        heights = pool_bars(magnitudes, self._bar_count, self._display_fraction)
        self._bars.setOpts(x=np.arange(heights.size), height=heights, width=0.8)

    def clear(self) -> None:
        self._bars.setOpts(x=[], height=[], width=0.8)
