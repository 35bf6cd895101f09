"""Timer engine for GroveTimer.

A single-run countdown state machine.  Ticks are driven by a recurring
one-second callback from a :class:`~grovetimer.core.scheduler.Scheduler`;
lifecycle changes are published to listeners registered with :meth:`on`.

Events and their listener arguments:

- ``started``  – :class:`TimerStarted`
- ``tick``     – :class:`TimerSnapshot`
- ``paused``   – :class:`TimerSnapshot`
- ``stopped``  – :class:`TimerSnapshot`
- ``reset``    – no arguments
- ``finished`` – :class:`TimerFinished`
- ``error``    – the exception raised while ticking
"""

import logging
import threading
from typing import Callable, Optional

from grovetimer.core.errors import InvalidDuration
from grovetimer.core.models import Phase, TimerFinished, TimerSnapshot, TimerStarted
from grovetimer.core.scheduler import ScheduledTask, Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)

EVENTS = ("started", "tick", "paused", "stopped", "reset", "finished", "error")


class TimerEngine:
    """Countdown timer with pause/resume and an event listener registry."""

    TICK_INTERVAL = 1.0

    def __init__(self, scheduler: Optional[Scheduler] = None) -> None:
        self._scheduler = scheduler if scheduler is not None else ThreadingScheduler()
        self._listeners: dict[str, list[Callable[..., None]]] = {name: [] for name in EVENTS}
        self._lock = threading.RLock()
        self._task: Optional[ScheduledTask] = None
        self._run_token = 0
        self._running = False
        self._remaining = 0
        self._total = 0
        self._phase = Phase.IDLE

    # ------------------------------------------------------------------
    # Listener registry
    # ------------------------------------------------------------------

    def on(self, event: str, listener: Callable[..., None]) -> None:
        """Register *listener* for *event*."""
        self._check_event(event)
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Callable[..., None]) -> None:
        """Unregister *listener*; unknown listeners are ignored."""
        self._check_event(event)
        try:
            self._listeners[event].remove(listener)
        except ValueError:
            pass

    @staticmethod
    def _check_event(event: str) -> None:
        if event not in EVENTS:
            raise ValueError(f"Unknown timer event: {event!r}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start(self, duration_seconds: int, phase: Phase = Phase.FOCUS) -> None:
        """Begin a run of *duration_seconds* in *phase*.

        An active run is stopped first.  Raises :class:`InvalidDuration` for
        non-positive durations without touching the current state.
        """
        seconds = int(duration_seconds)
        if seconds <= 0:
            raise InvalidDuration(duration_seconds)
        if phase is Phase.IDLE:
            raise ValueError("Cannot start a run in the idle phase")

        with self._lock:
            if self._running:
                self.stop()

            self._remaining = seconds
            self._total = seconds
            self._phase = phase
            self._running = True
            self._run_token += 1
            token = self._run_token

            logger.debug("Timer started: %s for %ds", phase.value, seconds)
            self._emit("started", TimerStarted(phase=phase, duration=seconds))
            self._emit("tick", self.get_snapshot())

            # A listener may have stopped or restarted the run already.
            if self._running and token == self._run_token:
                self._task = self._scheduler.schedule_repeating(
                    self.TICK_INTERVAL, lambda: self._on_tick(token)
                )

    def stop(self) -> None:
        """Halt ticking, keeping remaining time and phase."""
        with self._lock:
            self._cancel_task()
            self._running = False
            self._emit("stopped", self.get_snapshot())

    def pause(self) -> None:
        """Halt ticking so the run can be resumed.  No-op when not running."""
        with self._lock:
            if not self._running:
                return
            self._cancel_task()
            self._running = False
            self._emit("paused", self.get_snapshot())

    def resume(self) -> None:
        """Restart a paused or stopped run with its preserved remaining time."""
        with self._lock:
            if not self._running and self._remaining > 0:
                self.start(self._remaining, self._phase)

    def reset(self) -> None:
        """Stop if running and return to the idle phase."""
        with self._lock:
            if self._running:
                self.stop()
            self._cancel_task()
            self._remaining = 0
            self._total = 0
            self._phase = Phase.IDLE
            self._run_token += 1
            self._emit("reset")

    def get_snapshot(self) -> TimerSnapshot:
        with self._lock:
            return TimerSnapshot(
                running=self._running,
                remaining_seconds=self._remaining,
                total_seconds=self._total,
                phase=self._phase,
            )

    def get_remaining_seconds(self) -> int:
        return self._remaining

    def get_progress_percent(self) -> float:
        """Return elapsed share of the run as 0-100; 0 when idle."""
        with self._lock:
            if self._total == 0:
                return 0.0
            return (self._total - self._remaining) / self._total * 100

    @property
    def is_running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _on_tick(self, token: int) -> None:
        with self._lock:
            # Callback from a run that was cancelled while it was in flight.
            if token != self._run_token or not self._running:
                return
            try:
                self._remaining -= 1
                self._emit("tick", self.get_snapshot())
                if self._remaining <= 0:
                    self._complete()
            except Exception as exc:
                logger.exception("Error in timer tick; stopping timer")
                try:
                    self.stop()
                except Exception:
                    logger.exception("Error while stopping timer after a failed tick")
                self._emit_error(exc)

    def _complete(self) -> None:
        completed_phase = self._phase
        self._cancel_task()
        self._running = False
        self._remaining = 0
        self._total = 0
        self._phase = Phase.IDLE
        logger.debug("Timer finished: %s", completed_phase.value)
        self._emit("finished", TimerFinished(phase=completed_phase, was_successful=True))

    def _cancel_task(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _emit(self, event: str, *args) -> None:
        for listener in list(self._listeners[event]):
            listener(*args)

    def _emit_error(self, exc: Exception) -> None:
        for listener in list(self._listeners["error"]):
            try:
                listener(exc)
            except Exception:
                logger.exception("Timer error listener raised")
