"""Exercise catalog helpers.

The catalog lives in the ``library_exercises`` table and is read-only from
the app's point of view.  Each exercise is returned as a ``dict`` with
``id``, ``name``, ``muscle_group`` and ``thumbnail`` keys.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from . import DEFAULT_DB_PATH

_COLUMNS = "id, name, muscle_group, thumbnail"


def _row_to_dict(row) -> dict:
    ex_id, name, group, thumb = row
    return {
        "id": ex_id,
        "name": name,
        "muscle_group": group,
        "thumbnail": thumb,
    }


def get_exercise(exercise_id: str, db_path: Path = DEFAULT_DB_PATH) -> dict | None:
    """Return the catalog entry for ``exercise_id`` or ``None``."""

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"SELECT {_COLUMNS} FROM library_exercises WHERE id = ? AND deleted = 0",
            (exercise_id,),
        )
        row = cursor.fetchone()
    return _row_to_dict(row) if row else None


def get_all_exercises(
    db_path: Path = DEFAULT_DB_PATH,
    *,
    muscle_group: str | None = None,
    query: str | None = None,
) -> list[dict]:
    """Return catalog entries ordered by muscle group and name.

    ``muscle_group`` limits results to one group; ``"all"`` or ``None``
    disables the filter.  ``query`` is matched case-insensitively against
    the exercise name.
    """

    sql = f"SELECT {_COLUMNS} FROM library_exercises WHERE deleted = 0"
    params: list = []
    if muscle_group and muscle_group != "all":
        sql += " AND muscle_group = ?"
        params.append(muscle_group)
    sql += " ORDER BY muscle_group, name"

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(sql, params)
        exercises = [_row_to_dict(row) for row in cursor.fetchall()]

    needle = (query or "").strip().casefold()
    if needle:
        exercises = [ex for ex in exercises if needle in ex["name"].casefold()]
    return exercises


def get_muscle_groups(db_path: Path = DEFAULT_DB_PATH) -> list[str]:
    """Return the distinct muscle groups present in the catalog."""

    with sqlite3.connect(str(db_path)) as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT DISTINCT muscle_group FROM library_exercises "
            "WHERE deleted = 0 ORDER BY muscle_group"
        )
        return [row[0] for row in cursor.fetchall()]
