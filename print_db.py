"""Print the workouts stored in the session log."""

import argparse
import json
from pathlib import Path

from backend import DEFAULT_DB_PATH
from backend.db_io import sqlite_to_json, validate_database
from backend.sessions import get_session_details, get_session_history


def format_weight(weight):
    if weight is None:
        return "-"
    return f"{weight:g} kg"


def print_sessions(db_path: Path, limit=None) -> None:
    for session in get_session_history(limit, db_path=db_path):
        details = get_session_details(session["session_date"], db_path=db_path)
        status = "completed" if details["completed"] else "in progress"
        print(f"\n=== {details['session_date']}: {details['workout_name']} ({status}) ===")
        for exercise in details["exercises"]:
            print(f"\n  Exercise: {exercise['name']}")
            for s in exercise["sets"]:
                print(f"    Set {s['number']}: {format_weight(s['weight'])}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--db", type=Path, default=DEFAULT_DB_PATH, help="database file")
    parser.add_argument("--limit", type=int, default=None, help="number of days to show")
    parser.add_argument("--json", action="store_true", help="dump all tables as JSON")
    args = parser.parse_args(argv)

    ok, errors = validate_database(args.db)
    if not ok:
        parser.error("; ".join(errors))
    if args.json:
        print(json.dumps(sqlite_to_json(args.db), indent=2))
    else:
        print_sessions(args.db, args.limit)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
