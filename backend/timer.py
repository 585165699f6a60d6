"""Periodic display tick for a running workout."""

from __future__ import annotations

from typing import TYPE_CHECKING

from backend import DEFAULT_TICK_INTERVAL

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    from backend.workout_session import WorkoutSession


def _kivy_schedule_interval(callback, interval):
    from kivy.clock import Clock

    return Clock.schedule_interval(callback, interval)


class SessionTimer:
    """Drive ``on_tick(elapsed_seconds)`` while ``session`` is running.

    The timer never changes the session; each tick only re-derives the
    elapsed time.  It listens to the session so pausing, finishing or
    abandoning cancels the scheduled event straight away.

    ``schedule_interval`` has the signature of
    :meth:`kivy.clock.Clock.schedule_interval` and must return an object
    with a ``cancel()`` method.  Kivy's clock is used when it is omitted.
    """

    def __init__(
        self,
        session: "WorkoutSession",
        on_tick,
        interval: float = DEFAULT_TICK_INTERVAL,
        schedule_interval=None,
    ) -> None:
        self.session = session
        self.on_tick = on_tick
        self.interval = interval
        self._schedule_interval = schedule_interval or _kivy_schedule_interval
        self._event = None
        session.add_listener(self._on_session_changed)

    @property
    def running(self) -> bool:
        return self._event is not None

    def start(self) -> None:
        """Schedule ticks if the session clock is running."""

        if self._event or not self.session.is_running:
            return
        self._event = self._schedule_interval(self._tick, self.interval)
        self._tick(0)

    def stop(self) -> None:
        """Cancel any scheduled tick."""

        if self._event:
            self._event.cancel()
            self._event = None

    def sync(self) -> None:
        """Start or stop to match the session state."""

        if self.session.is_running:
            self.start()
        else:
            self.stop()
            self.on_tick(self.session.elapsed_seconds)

    def close(self) -> None:
        """Stop ticking and detach from the session."""

        self.stop()
        self.session.remove_listener(self._on_session_changed)

    def _on_session_changed(self, session) -> None:
        self.sync()

    def _tick(self, dt) -> None:
        if not self.session.is_running:
            self.stop()
            return
        self.on_tick(self.session.elapsed_seconds)
