from __future__ import annotations

import pytest

from acousticdiag.config.runtime import DiagConfig
from acousticdiag.core.errors import SessionError
from acousticdiag.core.runner import run_session
from acousticdiag.core.session import DiagnosticSession, SessionState
from conftest import FakeAudioSource, tone_blocks


class FakeClock:
    def __init__(self, step_s: float | None = None) -> None:
        self.now = 100.0
        self.step_s = step_s

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += self.step_s if self.step_s is not None else seconds


def _running_session(profile, records, events=None) -> DiagnosticSession:
    session = DiagnosticSession(
        FakeAudioSource(tone_blocks()),
        config=DiagConfig(),
        calibration_offset=0.0,
        record_sink=records.append,
    )
    session.select_machine(profile)
    session.start()
    if events is not None:
        poll, tick = session.poll, session.tick

        def _poll():
            events.append("poll")
            return poll()

        def _tick():
            events.append("tick")
            return tick()

        session.poll = _poll
        session.tick = _tick
    return session


def test_runs_until_window_elapses(drill) -> None:
    records, events = [], []
    session = _running_session(drill, records, events)
    clock = FakeClock()
    seen = []

    record = run_session(session, refresh_hz=10, clock=clock, sleep=clock.sleep, on_metrics=seen.append)

    assert session.state is SessionState.FINISHED
    assert records == [record]
    assert events.count("tick") == 10
    assert events[0] == "poll"
    # Every tick is preceded by a poll in the same iteration.
    for prev, cur in zip(events, events[1:]):
        assert not (prev == "tick" and cur == "tick")
    assert len(seen) == events.count("poll")
    assert record.db == seen[-1].db


def test_coarse_clock_never_underflows(drill) -> None:
    records, events = [], []
    session = _running_session(drill, records, events)
    clock = FakeClock(step_s=3.5)

    record = run_session(session, clock=clock, sleep=clock.sleep)

    assert record is not None
    assert records == [record]
    assert events.count("tick") == 10
    assert session.countdown is None


def test_requires_running_session(drill) -> None:
    session = DiagnosticSession(FakeAudioSource())
    session.select_machine(drill)
    with pytest.raises(SessionError):
        run_session(session)
