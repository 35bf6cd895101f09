"""In-process coding activity feed.

Accumulates :class:`CodingEdit` facts pushed by an editor integration into
one :class:`CodingActivity` per file and folds them into a
:class:`SessionCodingStats` when the tracking window closes.
"""

import logging
import threading
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional

from grovetimer.core.models import CodingActivity, CodingEdit, SessionCodingStats
from grovetimer.tracking.base import CodingActivityFeed

logger = logging.getLogger(__name__)


class CodingTracker(CodingActivityFeed):
    """Collects per-file editing activity during one tracking window.

    Active coding time is the sum of gaps between consecutive edits; a gap
    of ``IDLE_THRESHOLD`` or more counts as idle and adds nothing.
    """

    IDLE_THRESHOLD = timedelta(seconds=30)

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tracking = False
        self._activities: dict[str, CodingActivity] = {}  # keyed by file_id, first-seen order
        self._coding_time = 0.0
        self._last_edit_at: Optional[datetime] = None
        self._last_stats = SessionCodingStats()

    @property
    def is_tracking(self) -> bool:
        return self._tracking

    def start_tracking(self) -> None:
        with self._lock:
            if self._tracking:
                return
            self._tracking = True
            self._activities = {}
            self._coding_time = 0.0
            self._last_edit_at = None
        logger.info("Coding activity tracking started")

    def stop_tracking(self) -> SessionCodingStats:
        """Close the window and return its aggregate.

        When no window is open, the aggregate of the last closed window is
        returned again.
        """
        with self._lock:
            if not self._tracking:
                return self._last_stats
            self._tracking = False
            self._last_stats = self._aggregate()
            self._activities = {}
            stats = self._last_stats
        logger.info(
            "Coding activity tracking stopped: %d files, %d keystrokes",
            stats.files_edited, stats.total_keystrokes,
        )
        return stats

    def get_current_stats(self) -> SessionCodingStats:
        with self._lock:
            if not self._tracking:
                return self._last_stats
            return self._aggregate()

    def record_edit(self, edit: CodingEdit) -> None:
        """Fold one editing fact into the open window; ignored otherwise."""
        with self._lock:
            if not self._tracking:
                return

            activity = self._activities.get(edit.file_id)
            if activity is None:
                activity = CodingActivity(
                    file_id=edit.file_id,
                    language=edit.language,
                    first_edit_at=edit.timestamp,
                    last_edit_at=edit.timestamp,
                )
                self._activities[edit.file_id] = activity

            activity.lines_added += edit.lines_added
            activity.lines_removed += edit.lines_removed
            activity.lines_modified += edit.lines_modified
            activity.characters_typed += edit.characters_typed
            activity.keystrokes += edit.keystrokes
            activity.last_edit_at = edit.timestamp

            if self._last_edit_at is not None:
                gap = edit.timestamp - self._last_edit_at
                if timedelta(0) < gap < self.IDLE_THRESHOLD:
                    self._coding_time += gap.total_seconds()
            if self._last_edit_at is None or edit.timestamp > self._last_edit_at:
                self._last_edit_at = edit.timestamp

    def _aggregate(self) -> SessionCodingStats:
        stats = SessionCodingStats(coding_time_seconds=self._coding_time)
        best_score = 0.0
        for activity in self._activities.values():
            stats.total_lines_added += activity.lines_added
            stats.total_lines_removed += activity.lines_removed
            stats.total_lines_modified += activity.lines_modified
            stats.total_characters_typed += activity.characters_typed
            stats.total_keystrokes += activity.keystrokes
            if activity.language not in stats.languages_used:
                stats.languages_used.append(activity.language)

            score = activity.activity_score
            if stats.most_active_file is None or score > best_score:
                best_score = score
                stats.most_active_file = activity.file_id

            stats.activities.append(replace(activity))

        stats.files_edited = len(self._activities)
        return stats
