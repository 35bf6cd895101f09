"""Append-only session ledger.

Holds the single mutable draft for the run in progress and the ordered list
of finalized :class:`SessionRecord` entries.  Both are persisted through a
:class:`StateStore` under fixed keys so they survive restarts.
"""

import logging
import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, Optional

from grovetimer.core.errors import PersistenceError, SessionStateError
from grovetimer.core.models import Phase, SessionCodingStats, SessionRecord, SoundType
from grovetimer.persistence.store import StateStore
from grovetimer.tracking.base import CodingActivityFeed

logger = logging.getLogger(__name__)

SESSIONS_KEY = "grovetimer.sessions"
CURRENT_SESSION_KEY = "grovetimer.current_session"


class SessionLedger:
    """Owns the draft session and the finalized session history.

    Every mutation writes to the store before the in-memory state changes,
    so a :class:`~grovetimer.core.errors.PersistenceError` leaves the ledger
    and the draft exactly as they were and the call can be retried.
    """

    def __init__(
        self,
        store: StateStore,
        coding_feed: Optional[CodingActivityFeed] = None,
        project_name: str = "",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._coding_feed = coding_feed
        self.project_name = project_name
        self._clock = clock
        self._lock = threading.RLock()
        self._sessions: list[SessionRecord] = [
            SessionRecord.from_dict(raw) for raw in store.get(SESSIONS_KEY, [])
        ]
        raw_draft = store.get(CURRENT_SESSION_KEY)
        self._draft: Optional[SessionRecord] = (
            SessionRecord.from_dict(raw_draft) if raw_draft else None
        )

    # ------------------------------------------------------------------
    # Draft lifecycle
    # ------------------------------------------------------------------

    def open_session(
        self,
        phase: Phase,
        planned_duration: int,
        sound: Optional[SoundType] = None,
        tags: Iterable[str] = (),
    ) -> str:
        """Create the draft for a new run and return its id.

        Focus sessions also open a coding tracking window.
        """
        with self._lock:
            if self._draft is not None:
                raise SessionStateError(
                    f"Session {self._draft.id} is still open; finalize it first"
                )
            now = self._clock()
            draft = SessionRecord(
                id=str(uuid.uuid4()),
                phase=phase,
                planned_duration_seconds=planned_duration,
                started_at=now,
                ended_at=now,
                sound_used=sound,
                project_name=self.project_name,
                tags=list(tags),
            )
            self._save_draft(draft)

            if phase is Phase.FOCUS and self._coding_feed is not None:
                self._coding_feed.start_tracking()

            logger.info("Opened %s session %s", phase.value, draft.id)
            return draft.id

    def update_actual_duration(self, session_id: str, seconds: int) -> None:
        with self._lock:
            draft = self._require_draft(session_id)
            self._save_draft(
                replace(draft, actual_duration_seconds=seconds, ended_at=self._clock())
            )

    def record_pause(self, session_id: str) -> None:
        """Count an interruption on the draft without finalizing it."""
        with self._lock:
            draft = self._require_draft(session_id)
            self._save_draft(
                replace(
                    draft,
                    interruption_count=draft.interruption_count + 1,
                    ended_at=self._clock(),
                )
            )

    def complete_session(self, session_id: str) -> SessionRecord:
        """Finalize the draft as completed and append it."""
        with self._lock:
            return self._finalize(session_id, completed=True)

    def interrupt_session(self, session_id: str) -> SessionRecord:
        """Finalize the draft as interrupted and append it."""
        with self._lock:
            return self._finalize(session_id, completed=False)

    def recover_draft(self) -> Optional[SessionRecord]:
        """Close a draft left behind by a previous process.

        The draft is appended as interrupted.  A stale draft whose id is
        already in the ledger is simply discarded.
        """
        with self._lock:
            if self._draft is None:
                return None
            draft = self._draft
            if any(s.id == draft.id for s in self._sessions):
                self._store.set(CURRENT_SESSION_KEY, None)
                self._draft = None
                return None
            logger.warning("Recovering unfinished %s session %s", draft.phase.value, draft.id)
            return self._finalize(draft.id, completed=False)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_all_sessions(self) -> list[SessionRecord]:
        """Return copies of the finalized sessions in finalization order."""
        with self._lock:
            return [replace(s) for s in self._sessions]

    def get_current_session(self) -> Optional[SessionRecord]:
        with self._lock:
            return replace(self._draft) if self._draft is not None else None

    @property
    def current_session_id(self) -> Optional[str]:
        draft = self._draft
        return draft.id if draft is not None else None

    def get_current_coding_stats(self) -> Optional[SessionCodingStats]:
        """Live coding stats of the open tracking window, if any."""
        if self._coding_feed is None or not self._coding_feed.is_tracking:
            return None
        return self._coding_feed.get_current_stats()

    def clear_all_data(self) -> None:
        """Drop the whole history and any open draft."""
        with self._lock:
            self._store.set(SESSIONS_KEY, [])
            self._store.set(CURRENT_SESSION_KEY, None)
            self._sessions = []
            self._draft = None
            if self._coding_feed is not None and self._coding_feed.is_tracking:
                self._coding_feed.stop_tracking()
            logger.info("Cleared all session data")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_draft(self, session_id: str) -> SessionRecord:
        if self._draft is None or self._draft.id != session_id:
            raise SessionStateError(f"Session {session_id} is not the open draft")
        return self._draft

    def _save_draft(self, draft: SessionRecord) -> None:
        self._store.set(CURRENT_SESSION_KEY, draft.to_dict())
        self._draft = draft

    def _finalize(self, session_id: str, completed: bool) -> SessionRecord:
        draft = self._require_draft(session_id)

        # Kept on the draft so a retry after a failed write still has them.
        if (
            draft.phase is Phase.FOCUS
            and draft.coding_stats is None
            and self._coding_feed is not None
            and self._coding_feed.is_tracking
        ):
            draft.coding_stats = self._coding_feed.stop_tracking()

        record = replace(
            draft,
            ended_at=self._clock(),
            completed=completed or draft.completed,
            interrupted=(not completed) or draft.interrupted,
            interruption_count=draft.interruption_count + (0 if completed else 1),
            tags=list(draft.tags),
        )
        sessions = self._sessions + [record]
        self._store.set(SESSIONS_KEY, [s.to_dict() for s in sessions])
        self._sessions = sessions
        self._draft = None
        try:
            self._store.set(CURRENT_SESSION_KEY, None)
        except PersistenceError:
            # recover_draft discards a stale draft whose id is already appended.
            logger.warning("Session %s appended but its draft key was not cleared", record.id)

        logger.info(
            "%s %s session %s (%ds of %ds)",
            "Completed" if completed else "Interrupted",
            record.phase.value, record.id,
            record.actual_duration_seconds, record.planned_duration_seconds,
        )
        return record
