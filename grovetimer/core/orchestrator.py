"""Session orchestrator for GroveTimer.

Wires timer lifecycle events to session ledger writes.  The orchestrator
owns the id of the open draft session and guarantees that a draft is
finalized before the next run starts, so two sessions never overlap.
"""

import logging
from typing import Any, Iterable, Optional

from grovetimer.core.config import timer_durations
from grovetimer.core.errors import InvalidDuration, SessionStateError
from grovetimer.core.models import (
    Phase,
    SoundType,
    TimerFinished,
    TimerSnapshot,
    TimerStarted,
)
from grovetimer.core.timer import TimerEngine
from grovetimer.persistence.ledger import SessionLedger

logger = logging.getLogger(__name__)


class SessionOrchestrator:
    """Starts timer runs and keeps the session ledger in lockstep with them."""

    FOCUS_DURATION = 25 * 60
    SHORT_BREAK = 5 * 60
    LONG_BREAK = 15 * 60
    LONG_BREAK_INTERVAL = 4
    CUSTOM_MINUTES_RANGE = (1, 120)

    def __init__(
        self,
        timer: TimerEngine,
        ledger: SessionLedger,
        focus_seconds: int = FOCUS_DURATION,
        short_break_seconds: int = SHORT_BREAK,
        long_break_seconds: int = LONG_BREAK,
        long_break_interval: int = LONG_BREAK_INTERVAL,
        sound: SoundType = SoundType.NONE,
        tags: Iterable[str] = (),
    ) -> None:
        self.timer = timer
        self.ledger = ledger
        self.focus_seconds = focus_seconds
        self.short_break_seconds = short_break_seconds
        self.long_break_seconds = long_break_seconds
        self.long_break_interval = long_break_interval
        self.sound = sound
        self.tags: list[str] = list(tags)
        self.completed_focus_count = 0
        self._current_session_id: Optional[str] = None
        self._planned_seconds = 0

        # Nothing can be running yet, so any persisted draft is stale.
        self.ledger.recover_draft()

        timer.on("started", self._on_started)
        timer.on("tick", self._on_tick)
        timer.on("paused", self._on_paused)
        timer.on("stopped", self._on_stopped)
        timer.on("reset", self._on_reset)
        timer.on("finished", self._on_finished)
        timer.on("error", self._on_error)

    @classmethod
    def from_config(
        cls, config: dict[str, Any], timer: TimerEngine, ledger: SessionLedger
    ) -> "SessionOrchestrator":
        durations = timer_durations(config)
        try:
            sound = SoundType(config.get("default_sound", "none"))
        except ValueError:
            logger.warning("Unknown default_sound %r; using none", config.get("default_sound"))
            sound = SoundType.NONE
        return cls(
            timer,
            ledger,
            focus_seconds=durations["focus"],
            short_break_seconds=durations["short_break"],
            long_break_seconds=durations["long_break"],
            long_break_interval=durations["long_break_interval"],
            sound=sound,
            tags=config.get("default_tags") or (),
        )

    # ------------------------------------------------------------------
    # Draft ownership
    # ------------------------------------------------------------------

    @property
    def current_session_id(self) -> Optional[str]:
        return self._current_session_id

    @current_session_id.setter
    def current_session_id(self, session_id: Optional[str]) -> None:
        if session_id is not None and self._current_session_id is not None:
            raise SessionStateError(
                f"Session {self._current_session_id} is still open; cannot track {session_id}"
            )
        self._current_session_id = session_id

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start_focus(self) -> str:
        return self._begin(Phase.FOCUS, self.focus_seconds)

    def start_short_break(self) -> str:
        return self._begin(Phase.SHORT_BREAK, self.short_break_seconds)

    def start_long_break(self) -> str:
        return self._begin(Phase.LONG_BREAK, self.long_break_seconds)

    def start_break(self) -> str:
        """Start whichever break follows the completed focus sessions."""
        if self.next_break_phase() is Phase.LONG_BREAK:
            return self.start_long_break()
        return self.start_short_break()

    def start_custom(self, minutes: int) -> str:
        low, high = self.CUSTOM_MINUTES_RANGE
        if not low <= minutes <= high:
            raise ValueError(f"Custom duration must be between {low} and {high} minutes")
        return self._begin(Phase.CUSTOM, minutes * 60)

    def next_break_phase(self) -> Phase:
        """Long break after every ``long_break_interval`` completed focus sessions."""
        count = self.completed_focus_count
        if count > 0 and count % self.long_break_interval == 0:
            return Phase.LONG_BREAK
        return Phase.SHORT_BREAK

    def stop(self) -> None:
        """Stop the run, interrupting its session (also when paused)."""
        if self.timer.is_running or self._current_session_id is not None:
            self.timer.stop()

    def pause(self) -> None:
        self.timer.pause()

    def resume(self) -> None:
        """Resume a paused run.  A stopped run has no open session and stays stopped."""
        if self._current_session_id is None:
            logger.debug("Resume ignored: no open session")
            return
        self.timer.resume()

    def reset(self) -> None:
        self.timer.reset()
        self.completed_focus_count = 0

    def get_status(self) -> dict[str, Any]:
        """Plain-data view of the timer and the open session."""
        snapshot = self.timer.get_snapshot()
        coding = self.ledger.get_current_coding_stats()
        return {
            "timer": snapshot.to_dict(),
            "progress": self.timer.get_progress_percent(),
            "session_id": self._current_session_id,
            "completed_focus_count": self.completed_focus_count,
            "next_break": self.next_break_phase().value,
            "sound": self.sound.value,
            "coding": coding.to_dict() if coding is not None else None,
        }

    # ------------------------------------------------------------------
    # Timer listeners
    # ------------------------------------------------------------------

    def _on_started(self, event: TimerStarted) -> None:
        logger.info("Timer started: %s (%ds)", event.phase.value, event.duration)

    def _on_tick(self, snapshot: TimerSnapshot) -> None:
        if self._current_session_id is None:
            return
        # Planned duration, not snapshot.total_seconds: a resumed run restarts its total.
        elapsed = max(0, self._planned_seconds - snapshot.remaining_seconds)
        self.ledger.update_actual_duration(self._current_session_id, elapsed)

    def _on_paused(self, snapshot: TimerSnapshot) -> None:
        if self._current_session_id is not None:
            self.ledger.record_pause(self._current_session_id)

    def _on_stopped(self, snapshot: TimerSnapshot) -> None:
        self._interrupt_open_session()

    def _on_reset(self) -> None:
        self._interrupt_open_session()

    def _on_finished(self, event: TimerFinished) -> None:
        session_id = self._current_session_id
        if session_id is not None:
            if event.was_successful:
                self.ledger.update_actual_duration(session_id, self._planned_seconds)
                self.ledger.complete_session(session_id)
            else:
                self.ledger.interrupt_session(session_id)
            self.current_session_id = None

        if session_id is not None and event.was_successful and event.phase is Phase.FOCUS:
            self.completed_focus_count += 1
            logger.info(
                "Focus session complete (%d so far); next break: %s",
                self.completed_focus_count, self.next_break_phase().value,
            )

    def _on_error(self, exc: Exception) -> None:
        logger.error("Timer error: %s", exc)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _begin(self, phase: Phase, seconds: int) -> str:
        if seconds <= 0:
            raise InvalidDuration(seconds)

        if self.timer.is_running or self._current_session_id is not None:
            # Emits ``stopped``, which interrupts the open draft.
            self.timer.stop()

        session_id = self.ledger.open_session(phase, seconds, sound=self.sound, tags=self.tags)
        self.current_session_id = session_id
        self._planned_seconds = seconds
        self.timer.start(seconds, phase)
        return session_id

    def _interrupt_open_session(self) -> None:
        session_id = self._current_session_id
        if session_id is None:
            return
        self.ledger.interrupt_session(session_id)
        self.current_session_id = None
