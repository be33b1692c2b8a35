"""Pass/fail decision against a machine's acceptability envelope."""

from __future__ import annotations

from ..core.models import DiagnosticStatus, MachineProfile

DEFAULT_SIGNIFICANT_MAGNITUDE = 200.0


def level_exceeded(db: float, profile: MachineProfile) -> bool:
    return db > profile.max_db


def frequency_out_of_range(peak_frequency: float, profile: MachineProfile) -> bool:
    return peak_frequency < profile.peak_freq_low or peak_frequency > profile.peak_freq_high


def classify(
    db: float,
    peak_frequency: float,
    max_magnitude: float,
    profile: MachineProfile,
    *,
    significant_magnitude: float = DEFAULT_SIGNIFICANT_MAGNITUDE,
) -> DiagnosticStatus:
    """
    Return ``ABNORMAL`` when the level exceeds ``profile.max_db`` or when a
    strong peak (``max_magnitude > significant_magnitude``) sits outside the
    operating band; ``NORMAL`` otherwise.

    A quiet stray peak outside the band does not count: only a dominant peak
    says something about the machine.
    """
    if level_exceeded(db, profile):
        return DiagnosticStatus.ABNORMAL
    if max_magnitude > significant_magnitude and frequency_out_of_range(peak_frequency, profile):
        return DiagnosticStatus.ABNORMAL
    return DiagnosticStatus.NORMAL


__all__ = [
    "DEFAULT_SIGNIFICANT_MAGNITUDE",
    "level_exceeded",
    "frequency_out_of_range",
    "classify",
]
