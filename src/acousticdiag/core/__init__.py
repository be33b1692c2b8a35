"""Diagnostic engine core: data model, processor, and session lifecycle.

This package sits between the audio collaborators and the display: the
:class:`~acousticdiag.core.processor.AudioProcessor` turns raw blocks into
metrics, and the :class:`~acousticdiag.core.session.DiagnosticSession` state
machine owns one timed measurement window and emits its single terminal
record. Only the leaf data structures are re-exported here because the
analysis modules import them.
"""

from .models import DiagnosticStatus, HistoryRecord, MachineProfile, Metrics, SampleWindow
from .errors import (
    DeviceUnavailable,
    DiagnosticError,
    InvalidCalibration,
    PipelineNotReady,
    SessionError,
)
from .ringbuffer import SampleRingBuffer

__all__ = [
    "DiagnosticStatus",
    "HistoryRecord",
    "MachineProfile",
    "Metrics",
    "SampleWindow",
    "DiagnosticError",
    "DeviceUnavailable",
    "InvalidCalibration",
    "PipelineNotReady",
    "SessionError",
    "SampleRingBuffer",
]
