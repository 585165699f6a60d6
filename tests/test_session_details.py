from backend.sessions import (
    get_session_details,
    get_session_history,
    save_completed_session,
)


def _log(db_path, date, *names):
    save_completed_session(
        {
            "date": date,
            "exercises": [
                {"name": name, "completed_sets": idx, "weight": 20.0 * idx}
                for name in names
                for idx in (1, 2)
            ],
            "completed": True,
        },
        db_path=db_path,
    )


def test_get_session_details(sample_db):
    _log(sample_db, "2024-05-02", "Pull-up", "Hammer Curl")
    details = get_session_details("2024-05-02", db_path=sample_db)
    assert details["workout_name"] == "Custom workout"
    assert details["completed"] is True
    first_ex = details["exercises"][0]
    assert first_ex["name"] == "Pull-up"
    assert first_ex["sets"] == [
        {"number": 1, "weight": 20.0},
        {"number": 2, "weight": 40.0},
    ]


def test_get_session_details_unknown_day(sample_db):
    assert get_session_details("1999-01-01", db_path=sample_db) == {}


def test_history_is_newest_first(sample_db):
    _log(sample_db, "2024-05-01", "Pull-up")
    _log(sample_db, "2024-05-03", "Leg Extension", "Hammer Curl")
    _log(sample_db, "2024-05-02", "Push-up")

    history = get_session_history(db_path=sample_db)
    assert [h["session_date"] for h in history] == [
        "2024-05-03",
        "2024-05-02",
        "2024-05-01",
    ]
    assert history[0]["set_count"] == 4
    assert len(get_session_history(limit=1, db_path=sample_db)) == 1
