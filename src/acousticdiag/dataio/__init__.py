"""Persistence helpers (history log, settings, CSV export).

Utility modules here keep disk-level concerns isolated from the engine:
- :mod:`history` stores the capped, most-recent-first verdict log as JSON.
- :mod:`settings` persists the calibration offset as YAML.
- :mod:`csv_writer` exports the log for offline review.
"""

from .history import HistoryStore
from .settings import SettingsStore

__all__ = ["HistoryStore", "SettingsStore"]
