import pytest

import core
from backend import settings
from backend.utils import format_duration, parse_reps, parse_weight


@pytest.mark.parametrize(
    "value, expected",
    [("80", 80.0), ("80.5", 80.5), ("80kg", 80.0), ("", 0.0), (None, 0.0), ("abc", 0.0), (12, 12.0)],
)
def test_parse_weight(value, expected):
    assert parse_weight(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [("10", 10), ("10.7", 10), (" 8 reps", 8), ("", 0), (None, 0), ("x", 0)],
)
def test_parse_reps(value, expected):
    assert parse_reps(value) == expected


def test_format_duration():
    assert format_duration(0) == "00:00"
    assert format_duration(59) == "00:59"
    assert format_duration(3725) == "1:02:05"


def test_settings_defaults_written(tmp_path):
    assert settings.get_value("tick_interval") == 1.0
    assert settings.SETTINGS_PATH.exists()
    settings.set_value("workout_name", "Leg Day")
    settings.reset_cache()
    assert settings.get_value("workout_name") == "Leg Day"
    assert settings.get_value("unknown", "fallback") == "fallback"


def test_corrupt_settings_fall_back_to_defaults():
    settings.SETTINGS_PATH.write_text("not json")
    assert settings.get_value("workout_name") == "Custom workout"


def test_load_active_session_roundtrip(tmp_path, fake_clock):
    db_path = tmp_path / "workout.db"
    base = tmp_path / "recovery"
    settings.set_value("workout_name", "Upper Body")

    session = core.load_active_session(base, db_path, dispatch=lambda f, *a: f(*a))
    assert session.workout_name == "Upper Body"
    session.add_exercise("shoulder-14")
    session.start()
    fake_clock.advance(45)

    resumed = core.load_active_session(base, db_path, dispatch=lambda f, *a: f(*a))
    assert resumed.phase == core.PHASE_ACTIVE
    assert resumed.exercises[0]["name"] == "Arnold Press"
    assert resumed.elapsed_seconds == 45

    resumed.finish()
    history = core.get_session_history(db_path=db_path)
    assert history[0]["workout_name"] == "Upper Body"
    assert core.load_active_session(base, db_path).phase == core.PHASE_PICKING


def test_create_timer_uses_configured_interval(tmp_path):
    settings.set_value("tick_interval", 0.25)
    session = core.WorkoutSession(core.MemoryStore(), db_path=tmp_path / "unused.db")
    scheduled = []

    class Event:
        def cancel(self):
            pass

    def schedule(callback, interval):
        scheduled.append(interval)
        return Event()

    timer = core.create_timer(session, lambda elapsed: None, schedule)
    assert not timer.running
    session.add_exercise({"id": "x", "name": "X", "muscle_group": "abs"})
    session.start()
    assert scheduled == [0.25]


def test_create_plan_client_uses_configured_url():
    with pytest.raises(ValueError):
        core.create_plan_client("abc")
    settings.set_value("plan_service_url", "https://plans.example.test/")
    client = core.create_plan_client("abc")
    assert client.base_url == "https://plans.example.test"
    assert client.token == "abc"
