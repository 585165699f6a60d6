import logging
import threading
import time
from datetime import datetime
from functools import partial
from pathlib import Path

from backend import DEFAULT_DB_PATH, DEFAULT_WORKOUT_NAME
from backend.exercises import get_exercise
from backend.session_store import JsonFileStore
from backend.sessions import save_completed_session
from backend.utils import format_duration, parse_reps, parse_weight


PHASE_PICKING = "picking"
PHASE_ACTIVE = "active"
PHASE_SUMMARY = "summary"

# Set fields that may be edited through :meth:`WorkoutSession.update_set`.
SET_FIELDS = ("weight", "reps")


class SessionError(Exception):
    """Base class for workout session errors."""


class ValidationError(SessionError, ValueError):
    """A user action was rejected without changing the session."""


class DuplicateExerciseError(ValidationError):
    """The exercise is already part of the session."""


class ExerciseNotFoundError(SessionError, KeyError):
    """The referenced exercise is not part of the session or catalog."""

    __str__ = Exception.__str__


def run_in_background(func, *args) -> threading.Thread:
    """Run ``func(*args)`` on a daemon thread without waiting for it."""

    thread = threading.Thread(target=func, args=args, daemon=True)
    thread.start()
    return thread


def _empty_set() -> dict:
    return {"weight": None, "reps": None}


class WorkoutSession:
    """In-memory representation of a free-form workout session.

    The session moves through three phases: ``picking`` while exercises are
    chosen, ``active`` while the clock runs and sets are logged, and
    ``summary`` once finished.  Every change is written to ``store`` so an
    interrupted workout can be picked up again with :meth:`restore`.

    Elapsed time is derived from wall-clock timestamps rather than counted
    ticks, so time spent while the app is suspended or closed is included.
    """

    def __init__(
        self,
        store=None,
        *,
        db_path: Path = DEFAULT_DB_PATH,
        catalog=None,
        session_log=None,
        dispatch=None,
        workout_name: str = DEFAULT_WORKOUT_NAME,
    ):
        self.store = store if store is not None else JsonFileStore()
        self.db_path = Path(db_path)
        self.catalog = catalog or partial(get_exercise, db_path=self.db_path)
        self.session_log = session_log or partial(
            save_completed_session, db_path=self.db_path
        )
        self.dispatch = dispatch or run_in_background
        self.workout_name = workout_name

        self.phase = PHASE_PICKING
        self.exercises: list[dict] = []
        self.started_at: float | None = None
        self.paused_elapsed = 0.0
        self.is_paused = False
        self.ended_at: float | None = None
        self.summary_data: dict | None = None
        self.abandoned = False
        self._listeners: list = []

    # --------------------------------------------------------------
    # Listeners
    # --------------------------------------------------------------

    def add_listener(self, callback) -> None:
        """Call ``callback(session)`` after every state change."""

        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_listener(self, callback) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _changed(self) -> None:
        self.save_recovery_state()
        for callback in list(self._listeners):
            callback(self)

    # --------------------------------------------------------------
    # Timer
    # --------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        """``True`` while the workout clock is advancing."""

        return (
            not self.abandoned
            and self.phase == PHASE_ACTIVE
            and not self.is_paused
        )

    @property
    def elapsed_seconds(self) -> int:
        if self.phase == PHASE_SUMMARY and self.summary_data is not None:
            return self.summary_data["duration"]
        if self.phase != PHASE_ACTIVE or self.started_at is None:
            return 0
        if self.is_paused:
            return int(self.paused_elapsed)
        return max(0, int(time.time() - self.started_at))

    @property
    def formatted_time(self) -> str:
        return format_duration(self.elapsed_seconds)

    # --------------------------------------------------------------
    # Phase transitions
    # --------------------------------------------------------------

    def _require_phase(self, phase: str, action: str) -> None:
        if self.abandoned:
            raise ValidationError(f"Cannot {action}: session was abandoned")
        if self.phase != phase:
            raise ValidationError(f"Cannot {action} while {self.phase}")

    def start(self) -> None:
        """Start the workout clock."""

        self._require_phase(PHASE_PICKING, "start")
        if not self.exercises:
            raise ValidationError("no exercises")
        self.started_at = time.time()
        self.paused_elapsed = 0.0
        self.is_paused = False
        self.phase = PHASE_ACTIVE
        self._changed()

    def pause(self) -> None:
        """Freeze the clock at the current elapsed time."""

        self._require_phase(PHASE_ACTIVE, "pause")
        if self.is_paused:
            return
        self.paused_elapsed = max(0.0, time.time() - self.started_at)
        self.is_paused = True
        self._changed()

    def resume(self) -> None:
        """Continue the clock from where it was paused."""

        self._require_phase(PHASE_ACTIVE, "resume")
        if not self.is_paused:
            return
        self.started_at = time.time() - self.paused_elapsed
        self.is_paused = False
        self._changed()

    def toggle_pause(self) -> None:
        if self.is_paused:
            self.resume()
        else:
            self.pause()

    def finish(self) -> dict:
        """Finish the workout and return its summary.

        The summary is computed from in-memory data, the recovery state is
        cleared and the log entry is handed to the session log via
        ``dispatch``.  Failing to log never prevents finishing.
        """

        self._require_phase(PHASE_ACTIVE, "finish")
        self.summary_data = self.compute_summary(self.elapsed_seconds)
        self.ended_at = time.time()
        self.is_paused = False
        self.phase = PHASE_SUMMARY
        entry = self.log_entry()
        self._changed()
        self.dispatch(self._write_log, entry)
        return self.summary_data

    def _write_log(self, entry: dict) -> None:
        try:
            self.session_log(entry)
        except Exception:
            logging.exception("Failed to save workout to the session log")
        else:
            logging.info(
                "Logged workout of %s with %d sets", entry["date"], len(entry["exercises"])
            )

    def abandon(self) -> None:
        """Discard the session and its recovery state."""

        self.abandoned = True
        self.clear_recovery_state()
        for callback in list(self._listeners):
            callback(self)

    # --------------------------------------------------------------
    # Exercise and set editing
    # --------------------------------------------------------------

    def _ensure_editable(self) -> None:
        if self.abandoned:
            raise ValidationError("Session was abandoned")
        if self.phase == PHASE_SUMMARY:
            raise ValidationError("Session is already finished")

    def _find(self, exercise_id: str) -> dict:
        for exercise in self.exercises:
            if exercise["id"] == exercise_id:
                return exercise
        raise ExerciseNotFoundError(f"Exercise '{exercise_id}' is not in the session")

    def has_exercise(self, exercise_id: str) -> bool:
        return any(ex["id"] == exercise_id for ex in self.exercises)

    def add_exercise(self, exercise) -> dict:
        """Append ``exercise`` with one empty set.

        ``exercise`` is either a catalog mapping or a catalog id.  Display
        fields are copied so later catalog edits do not affect the session.
        """

        self._ensure_editable()
        if isinstance(exercise, str):
            details = self.catalog(exercise)
            if details is None:
                raise ExerciseNotFoundError(f"Exercise '{exercise}' is not in the catalog")
            exercise = details
        ex_id = exercise["id"]
        if self.has_exercise(ex_id):
            raise DuplicateExerciseError(f"Exercise '{ex_id}' already added")
        entry = {
            "id": ex_id,
            "name": exercise.get("name") or ex_id,
            "muscle_group": exercise.get("muscle_group"),
            "thumbnail": exercise.get("thumbnail"),
            "sets": [_empty_set()],
            "expanded": True,
        }
        self.exercises.append(entry)
        self._changed()
        return entry

    def remove_exercise(self, exercise_id: str) -> None:
        self._ensure_editable()
        remaining = [ex for ex in self.exercises if ex["id"] != exercise_id]
        if len(remaining) != len(self.exercises):
            self.exercises = remaining
            self._changed()

    def toggle_expanded(self, exercise_id: str) -> bool:
        """Flip the display flag of ``exercise_id`` and return the new value."""

        self._ensure_editable()
        exercise = self._find(exercise_id)
        exercise["expanded"] = not exercise["expanded"]
        self._changed()
        return exercise["expanded"]

    def add_set(self, exercise_id: str) -> int:
        """Append an empty set and return its index."""

        self._ensure_editable()
        exercise = self._find(exercise_id)
        exercise["sets"].append(_empty_set())
        self._changed()
        return len(exercise["sets"]) - 1

    def remove_set(self, exercise_id: str, index: int) -> bool:
        """Remove set ``index``; the last remaining set is never removed.

        Returns ``True`` if a set was removed.
        """

        self._ensure_editable()
        sets = self._find(exercise_id)["sets"]
        if not 0 <= index < len(sets):
            raise IndexError(f"Set {index} out of range for '{exercise_id}'")
        if len(sets) <= 1:
            return False
        del sets[index]
        self._changed()
        return True

    def update_set(self, exercise_id: str, index: int, field: str, value) -> None:
        """Store the raw ``value`` for ``field`` of set ``index``.

        Values are kept as entered and only parsed when aggregated.
        """

        self._ensure_editable()
        if field not in SET_FIELDS:
            raise ValueError(f"Unknown set field '{field}'")
        sets = self._find(exercise_id)["sets"]
        if not 0 <= index < len(sets):
            raise IndexError(f"Set {index} out of range for '{exercise_id}'")
        sets[index][field] = None if value is None else str(value)
        self._changed()

    # --------------------------------------------------------------
    # Summary
    # --------------------------------------------------------------

    def total_volume(self) -> float:
        """Return the sum of weight x reps over all logged sets."""

        return sum(
            parse_weight(s["weight"]) * parse_reps(s["reps"])
            for ex in self.exercises
            for s in ex["sets"]
        )

    def muscle_groups(self) -> list[str]:
        """Return the distinct muscle groups worked, without duplicates."""

        groups = (ex.get("muscle_group") for ex in self.exercises)
        return list(dict.fromkeys(g for g in groups if g))

    def compute_summary(self, duration: int) -> dict:
        return {
            "duration": duration,
            "total_volume": self.total_volume(),
            "muscle_groups": self.muscle_groups(),
            "exercise_count": len(self.exercises),
        }

    def log_entry(self) -> dict:
        """Return the session-log representation of this workout."""

        ended = self.ended_at if self.ended_at is not None else time.time()
        logged = []
        for ex in self.exercises:
            for idx, s in enumerate(ex["sets"], 1):
                weight = s["weight"]
                logged.append(
                    {
                        "name": ex["name"],
                        "completed_sets": idx,
                        "weight": parse_weight(weight) if weight not in (None, "") else None,
                    }
                )
        return {
            "date": datetime.fromtimestamp(ended).date().isoformat(),
            "workout_name": self.workout_name,
            "exercises": logged,
            "completed": True,
        }

    def summary(self) -> str:
        """Return a formatted text summary of the session."""

        data = self.summary_data or self.compute_summary(self.elapsed_seconds)
        lines = [f"Workout: {self.workout_name}"]
        lines.append(f"Duration: {format_duration(data['duration'])}")
        lines.append(f"Exercises: {data['exercise_count']}")
        lines.append(f"Volume: {data['total_volume']:g} kg")
        if data["muscle_groups"]:
            lines.append("Muscle groups: " + ", ".join(data["muscle_groups"]))
        for ex in self.exercises:
            lines.append(f"\n{ex['name']}")
            for idx, s in enumerate(ex["sets"], 1):
                lines.append(
                    f"  Set {idx}: {s['weight'] or '-'} kg x {s['reps'] or '-'}"
                )
        return "\n".join(lines)

    # --------------------------------------------------------------
    # Persistence helpers
    # --------------------------------------------------------------

    def to_dict(self) -> dict:
        """Return the JSON-serialisable recovery document."""

        active = self.phase == PHASE_ACTIVE
        return {
            "phase": self.phase,
            "exercises": self.exercises,
            "is_paused": self.is_paused if active else False,
            "started_at": self.started_at,
            "paused_elapsed": self.paused_elapsed,
        }

    def _load_state(self, data: dict) -> None:
        """Apply recovery ``data``; raises if it is malformed."""

        phase = data.get("phase", PHASE_PICKING)
        if phase not in (PHASE_PICKING, PHASE_ACTIVE):
            raise ValueError(f"unexpected phase {phase!r}")
        exercises = []
        seen = set()
        for raw in data.get("exercises") or []:
            ex_id = raw["id"]
            if ex_id in seen:
                raise ValueError(f"duplicate exercise {ex_id!r}")
            seen.add(ex_id)
            sets = [
                {"weight": s.get("weight"), "reps": s.get("reps")}
                for s in raw.get("sets") or []
            ] or [_empty_set()]
            exercises.append(
                {
                    "id": ex_id,
                    "name": raw.get("name") or ex_id,
                    "muscle_group": raw.get("muscle_group"),
                    "thumbnail": raw.get("thumbnail"),
                    "sets": sets,
                    "expanded": bool(raw.get("expanded", True)),
                }
            )
        started_at = data.get("started_at")
        if phase == PHASE_ACTIVE:
            started_at = float(started_at)
        paused_elapsed = max(0.0, float(data.get("paused_elapsed") or 0))

        self.phase = phase
        self.exercises = exercises
        self.started_at = started_at
        self.paused_elapsed = paused_elapsed
        self.is_paused = phase == PHASE_ACTIVE and bool(data.get("is_paused"))

    @classmethod
    def restore(cls, store=None, **kwargs) -> "WorkoutSession":
        """Return the session saved in ``store`` or a fresh one.

        Each stored copy is tried in turn; when none is usable a new
        session in the ``picking`` phase is returned.
        """

        session = cls(store, **kwargs)
        for data in session.store.documents():
            try:
                session._load_state(data)
            except (AttributeError, KeyError, TypeError, ValueError):
                logging.warning("Discarding invalid workout recovery state", exc_info=True)
                continue
            break
        return session

    def save_recovery_state(self) -> None:
        """Persist the current state, or clear it once finished."""

        if self.abandoned:
            return
        if self.phase == PHASE_SUMMARY:
            self.clear_recovery_state()
            return
        try:
            self.store.write(self.to_dict())
        except OSError:
            logging.exception("Could not save workout recovery state")

    def clear_recovery_state(self) -> None:
        try:
            self.store.clear()
        except OSError:
            logging.exception("Could not clear workout recovery state")
