"""Creation and inspection helpers for the workout database."""
from __future__ import annotations

from pathlib import Path
import logging
import sqlite3
from typing import Any, Dict, List, Tuple

from backend import DEFAULT_DB_PATH

# Schema and default catalog rows applied to fresh databases.
SCHEMA_PATH = Path(__file__).resolve().parents[1] / "data" / "workout_schema.sql"

# Minimal set of tables expected to exist in any valid workout database.
REQUIRED_TABLES = [
    "library_exercises",
    "session_sessions",
    "session_exercise_logs",
]


def init_database(db_path: Path = DEFAULT_DB_PATH) -> Path:
    """Create ``db_path`` from :data:`SCHEMA_PATH` if it is not initialised.

    The schema only uses ``CREATE TABLE IF NOT EXISTS`` and ``INSERT OR
    IGNORE`` so running it against an existing database is harmless.
    """

    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    script = SCHEMA_PATH.read_text(encoding="utf-8")
    with sqlite3.connect(str(db_path)) as conn:
        conn.executescript(script)
    logging.info("Initialised workout database at %s", db_path)
    return db_path


def sqlite_to_json(db_path: Path) -> Dict[str, List[Dict[str, Any]]]:
    """Return a JSON-serialisable representation of ``db_path``.

    Every user table is converted to a list of row dictionaries.
    """
    result: Dict[str, List[Dict[str, Any]]] = {}
    with sqlite3.connect(str(db_path)) as conn:
        conn.row_factory = sqlite3.Row
        cur = conn.cursor()
        cur.execute("""SELECT name FROM sqlite_master \
                       WHERE type='table' AND name NOT LIKE 'sqlite_%'""")
        tables = [r[0] for r in cur.fetchall()]
        for table in tables:
            cur.execute(f"SELECT * FROM {table}")
            result[table] = [dict(row) for row in cur.fetchall()]
    return result


def validate_database(db_path: Path) -> Tuple[bool, List[str]]:
    """Check that every table in :data:`REQUIRED_TABLES` exists.

    Returns a tuple of a success flag and a list of error messages.
    """
    errors: List[str] = []
    try:
        with sqlite3.connect(str(db_path)) as conn:
            cur = conn.cursor()
            for table in REQUIRED_TABLES:
                cur.execute(
                    "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
                    (table,),
                )
                if not cur.fetchone():
                    errors.append(f"missing table: {table}")
    except sqlite3.Error as exc:
        logging.exception("Could not validate database %s", db_path)
        errors.append(str(exc))
    return (len(errors) == 0, errors)
