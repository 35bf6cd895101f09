"""Unit tests for the in-process CodingTracker feed."""

from datetime import datetime, timedelta

import pytest

from grovetimer.core.models import CodingEdit
from grovetimer.tracking.coding_tracker import CodingTracker

T0 = datetime(2025, 3, 12, 9, 0, 0)


def _edit(file_id="app.py", language="python", seconds=0, **counts) -> CodingEdit:
    return CodingEdit(
        file_id=file_id,
        language=language,
        timestamp=T0 + timedelta(seconds=seconds),
        **counts,
    )


@pytest.fixture
def tracker():
    t = CodingTracker()
    t.start_tracking()
    return t


def test_edits_ignored_when_not_tracking():
    tracker = CodingTracker()
    tracker.record_edit(_edit(lines_added=5))
    tracker.start_tracking()
    assert tracker.get_current_stats().total_lines_added == 0


def test_accumulates_per_file(tracker):
    tracker.record_edit(_edit("a.py", lines_added=3, keystrokes=10))
    tracker.record_edit(_edit("a.py", seconds=5, lines_added=2, lines_removed=1, keystrokes=4))
    tracker.record_edit(_edit("b.ts", language="typescript", seconds=8, lines_modified=2))

    stats = tracker.stop_tracking()
    assert stats.files_edited == 2
    assert stats.total_lines_added == 5
    assert stats.total_lines_removed == 1
    assert stats.total_lines_modified == 2
    assert stats.total_keystrokes == 15
    assert stats.languages_used == ["python", "typescript"]

    a = stats.activities[0]
    assert a.file_id == "a.py"
    assert a.first_edit_at == T0
    assert a.last_edit_at == T0 + timedelta(seconds=5)


def test_coding_time_counts_only_short_gaps(tracker):
    tracker.record_edit(_edit(seconds=0))
    tracker.record_edit(_edit(seconds=10))   # +10
    tracker.record_edit(_edit(seconds=40))   # gap of 30 is idle
    tracker.record_edit(_edit(seconds=69))   # +29
    tracker.record_edit(_edit(seconds=69))   # zero gap adds nothing
    assert tracker.stop_tracking().coding_time_seconds == pytest.approx(39.0)


def test_single_edit_has_no_coding_time(tracker):
    tracker.record_edit(_edit())
    assert tracker.stop_tracking().coding_time_seconds == 0


def test_most_active_file_by_score(tracker):
    tracker.record_edit(_edit("a.py", lines_added=2, keystrokes=10))          # 3.0
    tracker.record_edit(_edit("b.py", seconds=1, lines_modified=3, keystrokes=5))  # 3.5
    assert tracker.stop_tracking().most_active_file == "b.py"


def test_most_active_file_tie_goes_to_first_seen(tracker):
    tracker.record_edit(_edit("a.py", lines_added=2, keystrokes=0))
    tracker.record_edit(_edit("b.py", seconds=1, lines_added=2, keystrokes=0))
    assert tracker.stop_tracking().most_active_file == "a.py"


def test_empty_window_has_no_most_active_file(tracker):
    stats = tracker.stop_tracking()
    assert stats.most_active_file is None
    assert stats.files_edited == 0


def test_stop_twice_returns_last_aggregate(tracker):
    tracker.record_edit(_edit(lines_added=4))
    first = tracker.stop_tracking()
    second = tracker.stop_tracking()
    assert second == first
    assert tracker.is_tracking is False


def test_start_tracking_resets_previous_window(tracker):
    tracker.record_edit(_edit(lines_added=4))
    tracker.stop_tracking()
    tracker.start_tracking()
    assert tracker.get_current_stats().total_lines_added == 0


def test_start_tracking_while_tracking_keeps_window(tracker):
    tracker.record_edit(_edit(lines_added=4))
    tracker.start_tracking()
    assert tracker.get_current_stats().total_lines_added == 4


def test_current_stats_is_a_copy(tracker):
    tracker.record_edit(_edit(lines_added=1))
    snapshot = tracker.get_current_stats()
    tracker.record_edit(_edit(seconds=1, lines_added=1))
    assert snapshot.activities[0].lines_added == 1
    assert tracker.get_current_stats().activities[0].lines_added == 2
