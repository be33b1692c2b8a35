"""Shared dataclasses for diagnostic sessions, readings, and records."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Tuple

import numpy as np


class DiagnosticStatus(enum.Enum):
    IDLE = "IDLE"
    NORMAL = "NORMAL"
    ABNORMAL = "ABNORMAL"


@dataclass(frozen=True)
class MachineProfile:
    """Acceptability envelope for one kind of machine."""

    id: str
    name: str
    category: str
    max_db: float
    peak_freq_range: Tuple[float, float]

    def __post_init__(self) -> None:
        low, high = self.peak_freq_range
        if float(low) > float(high):
            raise ValueError(
                f"peak_freq_range low must be <= high for {self.id!r}, got {self.peak_freq_range}"
            )
        object.__setattr__(self, "peak_freq_range", (float(low), float(high)))
        object.__setattr__(self, "max_db", float(self.max_db))

    @property
    def peak_freq_low(self) -> float:
        return self.peak_freq_range[0]

    @property
    def peak_freq_high(self) -> float:
        return self.peak_freq_range[1]


@dataclass(frozen=True)
class SampleWindow:
    """
    Copy of the processor's buffers for one polling tick.

    ``samples`` holds the latest filtered time-domain block normalised to
    [-1, 1]; ``magnitudes`` holds the byte-scaled spectrum of that block.
    """

    samples: np.ndarray
    magnitudes: np.ndarray
    sample_rate_hz: float
    fft_size: int


@dataclass(frozen=True)
class Metrics:
    db: float
    peak_frequency: int
    is_stable: bool
    status: DiagnosticStatus

    @classmethod
    def idle(cls) -> "Metrics":
        """Zeroed snapshot reported before the pipeline produces data."""
        return cls(db=0.0, peak_frequency=0, is_stable=False, status=DiagnosticStatus.IDLE)


@dataclass(frozen=True)
class HistoryRecord:
    """Terminal verdict of one diagnostic session."""

    machine_id: str
    machine_name: str
    status: DiagnosticStatus
    db: float
    peak_frequency: int
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def from_session(
        cls,
        machine: MachineProfile,
        metrics: Metrics,
        *,
        created_at: datetime | None = None,
    ) -> "HistoryRecord":
        return cls(
            machine_id=machine.id,
            machine_name=machine.name,
            status=metrics.status,
            db=metrics.db,
            peak_frequency=metrics.peak_frequency,
            created_at=created_at or datetime.now(timezone.utc),
        )

    def to_mapping(self) -> dict:
        return {
            "id": self.id,
            "machine_id": self.machine_id,
            "machine_name": self.machine_name,
            "created_at": self.created_at.isoformat(),
            "status": self.status.value,
            "db": float(self.db),
            "peak_frequency": int(self.peak_frequency),
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "HistoryRecord":
        """
        Rebuild a record from :meth:`to_mapping` output.

        Raises ``KeyError``/``ValueError`` for malformed entries so callers
        can decide whether to skip them.
        """
        created_at = datetime.fromisoformat(str(data["created_at"]))
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            id=str(data["id"]),
            machine_id=str(data["machine_id"]),
            machine_name=str(data["machine_name"]),
            created_at=created_at,
            status=DiagnosticStatus(str(data["status"])),
            db=float(data["db"]),
            peak_frequency=int(data["peak_frequency"]),
        )


__all__ = [
    "DiagnosticStatus",
    "MachineProfile",
    "SampleWindow",
    "Metrics",
    "HistoryRecord",
]
