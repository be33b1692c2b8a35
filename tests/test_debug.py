import logging

from acousticdiag.tools import debug
from acousticdiag.tools.debug import time_block


def test_time_block_is_silent_when_disabled(monkeypatch) -> None:
    monkeypatch.delenv(debug.DEBUG_ENV_VAR, raising=False)
    seen = []
    with time_block("poll", emitter=seen.append):
        pass
    assert seen == []


def test_time_block_reports_elapsed_time(monkeypatch) -> None:
    monkeypatch.setenv(debug.DEBUG_ENV_VAR, "1")
    seen = []
    with time_block("poll", emitter=seen.append):
        pass
    assert len(seen) == 1
    assert seen[0].startswith("poll took ")


def test_time_block_warns_over_budget(monkeypatch, caplog) -> None:
    monkeypatch.setenv(debug.DEBUG_ENV_VAR, "yes")
    ticks = iter([1.0, 1.5])
    monkeypatch.setattr(debug.time, "perf_counter", lambda: next(ticks, 1.5))
    with caplog.at_level(logging.WARNING, logger="acousticdiag.tools.debug"):
        with time_block("metrics poll", budget_ms=17):
            pass
    assert "budget 17.0 ms" in caplog.text
