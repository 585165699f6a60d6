import os
import sqlite3
import sys
import time
from pathlib import Path

import pytest

# Keep Kivy from parsing pytest's command line when the clock is imported
os.environ.setdefault("KIVY_NO_ARGS", "1")
os.environ.setdefault("KIVY_NO_CONSOLELOG", "1")

sys.path.append(str(Path(__file__).resolve().parents[1]))

from backend import settings
from backend.session_store import MemoryStore
from backend.workout_session import WorkoutSession


class FakeClock:
    """Stand-in for :func:`time.time` that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep settings reads and writes inside ``tmp_path``."""
    monkeypatch.setattr(settings, "SETTINGS_PATH", tmp_path / "settings.json")
    monkeypatch.setattr(settings, "_settings_cache", None)


@pytest.fixture
def sample_db(tmp_path: Path) -> Path:
    """Create a temporary database with the default exercise catalog."""
    db_path = tmp_path / "workout.db"
    sql_path = Path(__file__).resolve().parent.parent / "data" / "workout_schema.sql"

    conn = sqlite3.connect(db_path)
    with open(sql_path, "r", encoding="utf-8") as fh:
        conn.executescript(fh.read())
    conn.commit()
    conn.close()
    return db_path


@pytest.fixture
def fake_clock(monkeypatch) -> FakeClock:
    clock = FakeClock()
    monkeypatch.setattr(time, "time", clock)
    return clock


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def logged_entries() -> list:
    return []


@pytest.fixture
def session(memory_store, sample_db, logged_entries) -> WorkoutSession:
    """A fresh session that logs synchronously into ``logged_entries``."""
    return WorkoutSession(
        memory_store,
        db_path=sample_db,
        session_log=logged_entries.append,
        dispatch=lambda func, *args: func(*args),
    )
