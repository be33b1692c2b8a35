"""Exception hierarchy for the diagnostic engine."""

from __future__ import annotations


class DiagnosticError(Exception):
    """Base class for all recoverable diagnostic-engine conditions."""


class DeviceUnavailable(DiagnosticError):
    """The audio source could not be acquired (no device, permission denied)."""


class PipelineNotReady(DiagnosticError):
    """A sample window was requested before any audio reached the processor."""


class InvalidCalibration(DiagnosticError, ValueError):
    """A calibration offset was not a finite number inside the accepted range."""


class SessionError(DiagnosticError):
    """The session state machine was asked for an impossible transition."""


__all__ = [
    "DiagnosticError",
    "DeviceUnavailable",
    "PipelineNotReady",
    "InvalidCalibration",
    "SessionError",
]
