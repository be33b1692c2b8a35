"""Opt-in timing of display-cadence work, enabled with ``ACOUSTICDIAG_DEBUG=1``."""

from __future__ import annotations

import logging
import os
import time
from contextlib import contextmanager
from typing import Callable, Iterator

DEBUG_ENV_VAR = "ACOUSTICDIAG_DEBUG"

logger = logging.getLogger(__name__)


def debug_enabled() -> bool:
    return os.getenv(DEBUG_ENV_VAR, "").lower() in {"1", "true", "yes", "on"}


@contextmanager
def time_block(
    label: str,
    *,
    budget_ms: float | None = None,
    emitter: Callable[[str], None] | None = None,
) -> Iterator[None]:
    """
    Log how long the wrapped block took when debugging is enabled.

    With ``budget_ms`` set, a run over budget is logged as a warning; this is
    how a metrics poll that cannot keep up with the refresh timer shows up.
    Disabled, the block runs untimed.
    """
    if not debug_enabled():
        yield
        return

    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if budget_ms is not None and elapsed_ms > budget_ms:
            logger.warning("%s took %.3f ms (budget %.1f ms)", label, elapsed_ms, budget_ms)
        else:
            (emitter or logger.debug)(f"{label} took {elapsed_ms:.3f} ms")


__all__ = ["DEBUG_ENV_VAR", "debug_enabled", "time_block"]
