"""Desktop GUI implementation built with PySide6/Qt.

Panels in :mod:`gui.tabs` cover the machine list, the live measurement view,
the diagnostic log and calibration settings, while :mod:`gui.widgets` houses
shared Qt components. This layer owns the Qt event loop and timers and
delegates measurement to :mod:`acousticdiag.core`.
"""
