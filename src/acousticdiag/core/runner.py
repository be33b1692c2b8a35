"""Headless driver that runs a started session to completion."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .errors import SessionError
from .models import HistoryRecord, Metrics
from .session import DiagnosticSession

logger = logging.getLogger(__name__)


def run_session(
    session: DiagnosticSession,
    *,
    refresh_hz: Optional[float] = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    on_metrics: Optional[Callable[[Metrics], None]] = None,
) -> Optional[HistoryRecord]:
    """
    Drive ``session`` until its countdown ends and return the terminal record.

    Both cadences share one loop keyed by ``clock``: every iteration polls
    metrics first, then applies one countdown tick per whole second elapsed
    since the start, so the metrics published in a given second always
    precede that second's tick.
    """
    if not session.is_running:
        raise SessionError("run_session() needs a started session")

    rate = float(refresh_hz or session.config.refresh_hz)
    interval_s = 1.0 / max(1.0, rate)
    started = clock()
    seconds_applied = 0
    record: Optional[HistoryRecord] = None

    while session.is_running:
        metrics = session.poll()
        if on_metrics is not None:
            on_metrics(metrics)
        due = int(clock() - started)
        while seconds_applied < due and session.is_running:
            seconds_applied += 1
            finished = session.tick()
            if finished is not None:
                record = finished
        if session.is_running:
            sleep(interval_s)

    logger.debug("run_session finished after %d countdown ticks", seconds_applied)
    return record


__all__ = ["run_session"]
