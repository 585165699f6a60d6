import pytest

from backend.timer import SessionTimer
from backend.workout_session import WorkoutSession
from backend.session_store import MemoryStore


class FakeEvent:
    def __init__(self, callback, interval):
        self.callback = callback
        self.interval = interval
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Collects scheduled events instead of running a real clock."""

    def __init__(self):
        self.events = []

    def __call__(self, callback, interval):
        event = FakeEvent(callback, interval)
        self.events.append(event)
        return event

    @property
    def live(self):
        return [e for e in self.events if not e.cancelled]

    def fire(self):
        for event in self.live:
            event.callback(event.interval)


@pytest.fixture
def running(sample_db):
    session = WorkoutSession(
        MemoryStore(),
        db_path=sample_db,
        session_log=lambda entry: None,
        dispatch=lambda func, *args: func(*args),
    )
    session.add_exercise("chest-1")
    return session


def test_timer_only_runs_while_active(running, fake_clock):
    ticks = []
    scheduler = FakeScheduler()
    timer = SessionTimer(running, ticks.append, schedule_interval=scheduler)
    timer.start()
    assert not timer.running
    assert scheduler.events == []

    running.start()
    assert timer.running
    assert scheduler.live[0].interval == 1.0

    fake_clock.advance(3)
    scheduler.fire()
    assert ticks[-1] == 3


def test_pause_cancels_tick_and_resume_restarts(running, fake_clock):
    ticks = []
    scheduler = FakeScheduler()
    timer = SessionTimer(running, ticks.append, schedule_interval=scheduler)
    running.start()
    fake_clock.advance(10)
    running.pause()
    assert not timer.running
    assert scheduler.live == []
    assert ticks[-1] == 10

    fake_clock.advance(100)
    running.resume()
    assert timer.running
    assert len(scheduler.live) == 1
    fake_clock.advance(1)
    scheduler.fire()
    assert ticks[-1] == 11


def test_finish_stops_timer(running):
    scheduler = FakeScheduler()
    timer = SessionTimer(running, lambda elapsed: None, schedule_interval=scheduler)
    running.start()
    running.finish()
    assert not timer.running
    assert scheduler.live == []


def test_abandon_stops_timer(running):
    scheduler = FakeScheduler()
    timer = SessionTimer(running, lambda elapsed: None, schedule_interval=scheduler)
    running.start()
    assert timer.running
    running.abandon()
    assert not timer.running
    assert scheduler.live == []


def test_close_detaches_from_session(running):
    scheduler = FakeScheduler()
    timer = SessionTimer(running, lambda elapsed: None, schedule_interval=scheduler)
    running.start()
    timer.close()
    assert scheduler.live == []
    running.pause()
    running.resume()
    assert scheduler.live == []


def test_tick_stops_itself_when_session_is_no_longer_running(running):
    ticks = []
    scheduler = FakeScheduler()
    timer = SessionTimer(running, ticks.append, schedule_interval=scheduler)
    running.start()
    running.is_paused = True
    scheduler.fire()
    assert not timer.running


def test_default_scheduler_uses_kivy_clock(running):
    pytest.importorskip("kivy.clock")
    timer = SessionTimer(running, lambda elapsed: None, interval=0.5)
    running.start()
    assert timer.running
    assert timer._event.timeout == 0.5
    timer.close()
    assert not timer.running
