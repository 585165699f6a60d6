from __future__ import annotations

from pathlib import Path

from backend import (
    DEFAULT_DB_PATH,
    DEFAULT_TICK_INTERVAL,
    DEFAULT_WORKOUT_NAME,
    RECOVERY_BASE,
)
from backend import settings
from backend.db_io import init_database
from backend.exercises import get_all_exercises, get_exercise, get_muscle_groups
from backend.plans import PlanClient, PlanError
from backend.session_store import JsonFileStore, MemoryStore
from backend.sessions import (
    get_session_details,
    get_session_history,
    save_completed_session,
)
from backend.timer import SessionTimer
from backend.workout_session import (
    PHASE_ACTIVE,
    PHASE_PICKING,
    PHASE_SUMMARY,
    DuplicateExerciseError,
    ExerciseNotFoundError,
    SessionError,
    ValidationError,
    WorkoutSession,
)


def load_active_session(
    recovery_base: Path = RECOVERY_BASE,
    db_path: Path = DEFAULT_DB_PATH,
    **kwargs,
) -> WorkoutSession:
    """Return the in-progress workout, or a new one if none was saved.

    The session log database is created on first use and the workout name
    is taken from the user settings.
    """

    init_database(db_path)
    kwargs.setdefault(
        "workout_name", settings.get_value("workout_name", DEFAULT_WORKOUT_NAME)
    )
    return WorkoutSession.restore(
        JsonFileStore(recovery_base), db_path=db_path, **kwargs
    )


def create_timer(session: WorkoutSession, on_tick, schedule_interval=None) -> SessionTimer:
    """Return a :class:`SessionTimer` using the configured tick interval."""

    interval = float(settings.get_value("tick_interval", DEFAULT_TICK_INTERVAL))
    timer = SessionTimer(session, on_tick, interval, schedule_interval)
    timer.sync()
    return timer


def create_plan_client(token: str | None) -> PlanClient:
    """Return a :class:`PlanClient` for the configured plan service URL."""

    base_url = (settings.get_value("plan_service_url") or "").strip()
    if not base_url:
        raise ValueError("plan_service_url is not configured")
    return PlanClient(base_url, token)


__all__ = [
    "DEFAULT_DB_PATH",
    "DEFAULT_TICK_INTERVAL",
    "RECOVERY_BASE",
    "PHASE_ACTIVE",
    "PHASE_PICKING",
    "PHASE_SUMMARY",
    "DuplicateExerciseError",
    "ExerciseNotFoundError",
    "JsonFileStore",
    "MemoryStore",
    "PlanClient",
    "PlanError",
    "SessionError",
    "SessionTimer",
    "ValidationError",
    "WorkoutSession",
    "create_plan_client",
    "create_timer",
    "get_all_exercises",
    "get_exercise",
    "get_muscle_groups",
    "get_session_details",
    "get_session_history",
    "init_database",
    "load_active_session",
    "save_completed_session",
]
