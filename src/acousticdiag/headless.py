"""Qt-free diagnostic runs for terminals and scripts."""

from __future__ import annotations

import logging
from typing import Callable, Optional, TextIO

from .audio.sources import SoundDeviceSource, SyntheticSource
from .config.app_config import AppConfig
from .config.catalog import find_machine
from .config.runtime import DiagConfig
from .core.errors import DeviceUnavailable
from .core.models import DiagnosticStatus, HistoryRecord, Metrics
from .core.runner import run_session
from .core.session import DiagnosticSession
from .dataio.history import HistoryStore
from .dataio.settings import SettingsStore

logger = logging.getLogger(__name__)


def build_source(
    config: DiagConfig,
    *,
    synthetic: bool = False,
    tone_hz: float = 120.0,
    device: int | str | None = None,
):
    """Return the audio source selected on the command line."""
    if synthetic:
        return SyntheticSource(config.sample_rate_hz, block_size=config.block_size, tone_hz=tone_hz)
    return SoundDeviceSource(config.sample_rate_hz, block_size=config.block_size, device=device)


def format_record(record: HistoryRecord) -> str:
    return (
        f"{record.machine_name}: {record.status.value} "
        f"({record.db:.1f} dB, {record.peak_frequency} Hz)"
    )


def run_headless(
    app_config: AppConfig,
    machine_id: str,
    *,
    audio_source=None,
    synthetic: bool = False,
    tone_hz: float = 120.0,
    device: int | str | None = None,
    out: Optional[TextIO] = None,
    run: Callable[..., Optional[HistoryRecord]] = run_session,
) -> int:
    """
    Run one diagnostic window without a GUI and print the verdict.

    The record is appended to the history file like a GUI run; a history
    file that cannot be written is logged and the verdict still prints. Returns a
    process exit code: 0 for NORMAL, 1 for ABNORMAL, 2 when the run could
    not take place.
    """
    try:
        machine = find_machine(app_config.catalog, machine_id)
    except KeyError:
        known = ", ".join(p.id for p in app_config.catalog)
        logger.error("Unknown machine %r (known: %s)", machine_id, known)
        return 2

    runtime = app_config.runtime.sanitized()
    paths = app_config.paths
    paths.ensure()
    history = HistoryStore(paths.history_file, limit=runtime.history_limit)
    settings = SettingsStore(paths.settings_file)
    source = audio_source or build_source(runtime, synthetic=synthetic, tone_hz=tone_hz, device=device)

    def _save_record(record: HistoryRecord) -> None:
        try:
            history.append_history(record)
        except OSError:
            logger.exception("Failed to save diagnostic to %s", paths.history_file)

    session = DiagnosticSession(
        source,
        config=runtime,
        calibration_offset=settings.load_calibration(),
        record_sink=_save_record,
    )
    session.select_machine(machine)
    try:
        session.start()
    except DeviceUnavailable as exc:
        logger.error("Cannot start diagnostic: %s", exc)
        return 2

    def _log_metrics(metrics: Metrics) -> None:
        logger.debug("%.1f dB, %d Hz, %s", metrics.db, metrics.peak_frequency, metrics.status.value)

    try:
        record = run(session, on_metrics=_log_metrics)
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping diagnostic")
        record = session.stop()

    if record is None:
        return 2
    print(format_record(record), file=out)
    return 1 if record.status is DiagnosticStatus.ABNORMAL else 0


__all__ = ["build_source", "format_record", "run_headless"]
