from .metric_card import MetricCard
from .spectrum_plot import SpectrumBarsWidget, pool_bars

__all__ = [
    "MetricCard",
    "SpectrumBarsWidget",
    "pool_bars",
]
