"""Tests for the TextFormatter."""

from datetime import date, timedelta

import pytest

from grovetimer.core.models import DailyStats, MonthlyStats, OverallStats, SoundType, WeeklyStats
from grovetimer.reporting.formatter import TextFormatter


# ------------------------------------------------------------------
# format_duration
# ------------------------------------------------------------------

@pytest.mark.parametrize(
    "minutes, expected",
    [
        (0, "0m"),
        (-5, "0m"),
        (1, "1m"),
        (59.9, "59m"),
        (60, "1h 0m"),
        (135, "2h 15m"),
        (6000, "100h 0m"),
    ],
)
def test_format_duration(minutes, expected):
    assert TextFormatter.format_duration(minutes) == expected


# ------------------------------------------------------------------
# Status line
# ------------------------------------------------------------------

def test_status_line():
    daily = DailyStats(date=date(2025, 3, 12), total_focus_time=75, completed_sessions=3)
    overall = OverallStats(current_streak=4, trees_grown=2)
    line = TextFormatter.format_status_line(daily, overall)
    assert line == "Today: 1h 15m focused | 3 completed | Streak: 4d | Trees: 2"


def test_status_line_with_code():
    daily = DailyStats(date=date(2025, 3, 12), total_lines_added=120)
    line = TextFormatter.format_status_line(daily, OverallStats())
    assert line.endswith("| 120 lines")


# ------------------------------------------------------------------
# Reports
# ------------------------------------------------------------------

def test_format_daily_without_coding():
    stats = DailyStats(
        date=date(2025, 3, 12),
        total_focus_time=50,
        total_break_time=10,
        completed_sessions=2,
        interrupted_sessions=1,
        total_sessions=3,
        productivity=66.7,
        longest_streak=5,
        most_used_sound=SoundType.RAIN,
    )
    text = TextFormatter.format_daily(stats)
    assert text.startswith("Daily Stats: Wednesday, March 12, 2025")
    assert "50m" in text
    assert "2 completed, 1 interrupted, 3 total" in text
    assert "67%" in text
    assert "rain" in text
    assert "Coding:" not in text


def test_format_daily_with_coding():
    stats = DailyStats(
        date=date(2025, 3, 12),
        total_keystrokes=400,
        files_edited=2,
        languages_used=["python", "go"],
        active_coding_time=12.5,
    )
    text = TextFormatter.format_daily(stats)
    assert "Coding:" in text
    assert "python, go" in text
    assert "12m" in text


def test_format_weekly_table():
    monday = date(2025, 3, 10)
    days = [DailyStats(date=monday + timedelta(days=i)) for i in range(7)]
    days[2] = DailyStats(date=monday + timedelta(days=2), total_focus_time=100,
                         total_sessions=4, completed_sessions=4)
    stats = WeeklyStats(
        week_start=monday,
        daily_stats=days,
        total_focus_time=100,
        average_daily_focus=100 / 7,
        best_day=monday + timedelta(days=2),
        consistency=100 / 7,
    )
    text = TextFormatter.format_weekly(stats)
    assert "Weekly Stats: week of March 10, 2025" in text
    assert "Best day:        Wednesday" in text
    assert "14%" in text

    table_lines = text.split("Daily Breakdown:\n")[1].splitlines()
    assert table_lines[0].split() == ["Day", "Focus", "Break", "Sessions", "Done"]
    assert len(table_lines) == 2 + 7
    assert table_lines[4].split() == ["Wed", "12", "1h", "40m", "0m", "4", "4"]


def test_format_weekly_hides_best_day_when_empty():
    monday = date(2025, 3, 10)
    stats = WeeklyStats(
        week_start=monday,
        daily_stats=[DailyStats(date=monday + timedelta(days=i)) for i in range(7)],
        best_day=monday,
    )
    assert "Best day" not in TextFormatter.format_weekly(stats)


def test_format_monthly():
    stats = MonthlyStats(
        month="2025-03",
        weekly_stats=[WeeklyStats(week_start=date(2025, 3, 3), total_focus_time=90, consistency=50)],
        total_focus_time=90,
        average_weekly_focus=18,
        growth=-12.5,
        achievements=["Century Focus"],
    )
    text = TextFormatter.format_monthly(stats)
    assert text.startswith("Monthly Stats: 2025-03")
    assert "-12.5%" in text
    assert "Mar 03" in text
    assert "Achievements: Century Focus" in text


def test_format_overall_with_coding():
    stats = OverallStats(
        total_sessions=10,
        total_focus_time=3.25,
        trees_grown=2,
        total_keystrokes=5000,
        total_files_edited=4,
        favorite_language="python",
        coding_efficiency=42.0,
    )
    text = TextFormatter.format_overall(stats)
    assert "Sessions:        10" in text
    assert "3.2h" in text or "3.3h" in text
    assert "Trees grown:     2" in text
    assert "Favorite language: python" in text
    assert "42%" in text


def test_format_overall_without_coding():
    text = TextFormatter.format_overall(OverallStats())
    assert "Coding:" not in text
    assert "Favorite sound" not in text
