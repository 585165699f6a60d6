"""Session log: persistence of finished workouts.

A finished :class:`~backend.workout_session.WorkoutSession` produces a log
entry of the form::

    {
        "date": "2024-05-01",
        "workout_name": "Custom workout",
        "exercises": [{"name": ..., "completed_sets": 1, "weight": 80.0}, ...],
        "completed": True,
    }

with one ``exercises`` item per logged set.  Entries are stored one session
row per calendar day.  A second workout finished on the same day reuses that
row and appends its set logs.
"""

from __future__ import annotations

import sqlite3
import time
from pathlib import Path

from backend import DEFAULT_DB_PATH, DEFAULT_WORKOUT_NAME


def validate_log_entry(entry: dict) -> list[str]:
    """Return a list of validation errors for ``entry``."""

    errors = []
    if not entry.get("date"):
        errors.append("Log entry has no date")
    for item in entry.get("exercises", []):
        if not item.get("name"):
            errors.append("Logged set has no exercise name")
            break
    return errors


def save_completed_session(entry: dict, db_path: Path = DEFAULT_DB_PATH) -> int:
    """Persist ``entry`` and return the id of the day's session row."""

    errors = validate_log_entry(entry)
    if errors:
        raise ValueError("; ".join(errors))

    now = time.time()
    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id FROM session_sessions WHERE session_date = ?",
            (entry["date"],),
        )
        row = cursor.fetchone()
        if row is None:
            cursor.execute(
                """
                INSERT INTO session_sessions
                    (session_date, workout_name, completed, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    entry["date"],
                    entry.get("workout_name") or DEFAULT_WORKOUT_NAME,
                    int(bool(entry.get("completed", True))),
                    now,
                    now,
                ),
            )
            session_id = cursor.lastrowid
        else:
            session_id = row[0]
            cursor.execute(
                "UPDATE session_sessions SET completed = ?, updated_at = ? WHERE id = ?",
                (int(bool(entry.get("completed", True))), now, session_id),
            )

        cursor.executemany(
            """
            INSERT INTO session_exercise_logs
                (session_id, exercise_name, sets_completed, weight, logged_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (
                    session_id,
                    item["name"],
                    item.get("completed_sets", 1),
                    item.get("weight"),
                    now,
                )
                for item in entry.get("exercises", [])
            ],
        )
    return session_id


def get_session_history(limit: int | None = None, db_path: Path = DEFAULT_DB_PATH) -> list[dict]:
    """Return logged sessions, most recent day first.

    Each item contains ``session_date``, ``workout_name``, ``completed`` and
    ``set_count`` keys.
    """

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        query = (
            "SELECT s.session_date, s.workout_name, s.completed, COUNT(l.id) "
            "FROM session_sessions s "
            "LEFT JOIN session_exercise_logs l ON l.session_id = s.id "
            "GROUP BY s.id ORDER BY s.session_date DESC"
        )
        if limit is not None:
            cursor.execute(query + " LIMIT ?", (limit,))
        else:
            cursor.execute(query)
        rows = cursor.fetchall()
    return [
        {
            "session_date": date,
            "workout_name": name,
            "completed": bool(completed),
            "set_count": count,
        }
        for date, name, completed, count in rows
    ]


def get_session_details(session_date: str, db_path: Path = DEFAULT_DB_PATH) -> dict:
    """Return the session logged on ``session_date`` with its sets.

    Sets are grouped by exercise in logging order.  An empty ``dict`` is
    returned when nothing was logged that day.
    """

    with sqlite3.connect(str(db_path)) as conn:
        cur = conn.cursor()
        cur.execute(
            "SELECT id, workout_name, completed FROM session_sessions WHERE session_date = ?",
            (session_date,),
        )
        row = cur.fetchone()
        if row is None:
            return {}
        session_id, name, completed = row
        cur.execute(
            """
            SELECT exercise_name, sets_completed, weight
            FROM session_exercise_logs
            WHERE session_id = ?
            ORDER BY id
            """,
            (session_id,),
        )
        exercises: list[dict] = []
        by_name: dict[str, dict] = {}
        for ex_name, number, weight in cur.fetchall():
            if ex_name not in by_name:
                by_name[ex_name] = {"name": ex_name, "sets": []}
                exercises.append(by_name[ex_name])
            by_name[ex_name]["sets"].append({"number": number, "weight": weight})

    return {
        "session_date": session_date,
        "workout_name": name,
        "completed": bool(completed),
        "exercises": exercises,
    }
