"""Shared constants and globals for backend modules."""

from __future__ import annotations

from pathlib import Path

# Seconds between timer ticks while a workout is running
DEFAULT_TICK_INTERVAL = 1.0

# Name recorded in the session log for ad-hoc workouts
DEFAULT_WORKOUT_NAME = "Custom workout"

# Path to the bundled SQLite database shipped with the application
DEFAULT_DB_PATH = (
    Path(__file__).resolve().parent.parent / "data" / "workout.db"
)

# Base path of the in-progress session recovery files.  The store appends
# ``_1.json`` and ``_2.json`` to keep a primary and a backup copy.
RECOVERY_BASE = (
    Path(__file__).resolve().parent.parent / "data" / "active_workout_state"
)

__all__ = [
    "DEFAULT_TICK_INTERVAL",
    "DEFAULT_WORKOUT_NAME",
    "DEFAULT_DB_PATH",
    "RECOVERY_BASE",
]
