"""Statistics derived from the session ledger.

Every view is recomputed from a ledger snapshot; nothing here keeps counters
of its own.  The aggregator indexes the snapshot by start date once, so each
daily, weekly or monthly view costs one pass over the days it covers.
"""

from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable, Optional, Sequence, TypeVar

from grovetimer.core.models import (
    DailyStats,
    MonthlyStats,
    OverallStats,
    Phase,
    SessionRecord,
    WeeklyStats,
)

T = TypeVar("T")


def _mode(values: Iterable[T]) -> Optional[T]:
    """Most frequent value; the first one encountered wins a tie."""
    counts: dict[T, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    if not counts:
        return None
    return max(counts, key=counts.__getitem__)


def _percent(part: float, whole: float) -> float:
    return part * 100 / whole if whole else 0.0


def week_start_for(day: date) -> date:
    """Monday of the week containing *day*."""
    return day - timedelta(days=day.weekday())


def weeks_in_month(year: int, month: int) -> list[date]:
    """Mondays falling inside the month; each starts one Monday-aligned week."""
    first = date(year, month, 1)
    next_month = date(year + month // 12, month % 12 + 1, 1)
    current = first + timedelta(days=(7 - first.weekday()) % 7)
    weeks = []
    while current < next_month:
        weeks.append(current)
        current += timedelta(days=7)
    return weeks


def previous_month(year: int, month: int) -> tuple[int, int]:
    return (year - 1, 12) if month == 1 else (year, month - 1)


class StatisticsAggregator:
    """Daily, weekly, monthly and overall statistics over a ledger snapshot."""

    CENTURY_FOCUS_MINUTES = 100 * 60
    WEEKLY_WARRIOR_MINUTES = 20 * 60
    CONSISTENT_GROWER_PERCENT = 80
    FOCUS_SESSIONS_PER_TREE = 4

    def __init__(self, sessions: Sequence[SessionRecord], today: Optional[date] = None) -> None:
        self.sessions = list(sessions)
        self.today = today if today is not None else date.today()

        self._by_date: dict[date, list[SessionRecord]] = defaultdict(list)
        completed_dates: set[date] = set()
        for session in self.sessions:
            self._by_date[session.start_date].append(session)
            if session.completed:
                completed_dates.add(session.start_date)
        self._completed_dates = completed_dates
        self._longest_streak: Optional[int] = None

    @classmethod
    def from_ledger(cls, ledger, today: Optional[date] = None) -> "StatisticsAggregator":
        return cls(ledger.get_all_sessions(), today)

    # ------------------------------------------------------------------
    # Daily / weekly / monthly
    # ------------------------------------------------------------------

    def daily_stats(self, target_date: Optional[date] = None) -> DailyStats:
        """Statistics for the sessions that started on *target_date* (default today)."""
        target = target_date if target_date is not None else self.today
        sessions = self._by_date.get(target, [])

        focus = [s for s in sessions if s.phase is Phase.FOCUS]
        breaks = [s for s in sessions if s.phase.is_break]
        completed = sum(1 for s in sessions if s.completed)
        interrupted = sum(1 for s in sessions if s.interrupted)

        files: set[str] = set()
        languages: list[str] = []
        lines_added = keystrokes = 0
        coding_seconds = 0.0
        for session in focus:
            stats = session.coding_stats
            if stats is None:
                continue
            lines_added += stats.total_lines_added
            keystrokes += stats.total_keystrokes
            coding_seconds += stats.coding_time_seconds
            files.update(a.file_id for a in stats.activities)
            for lang in stats.languages_used:
                if lang not in languages:
                    languages.append(lang)

        return DailyStats(
            date=target,
            total_focus_time=sum(s.actual_duration_seconds for s in focus) / 60,
            total_break_time=sum(s.actual_duration_seconds for s in breaks) / 60,
            completed_sessions=completed,
            interrupted_sessions=interrupted,
            total_sessions=len(sessions),
            productivity=_percent(completed, len(sessions)),
            longest_streak=self.longest_streak(),
            most_used_sound=_mode(s.sound_used for s in sessions if s.sound_used is not None),
            total_lines_added=lines_added,
            total_keystrokes=keystrokes,
            files_edited=len(files),
            languages_used=languages,
            active_coding_time=coding_seconds / 60,
        )

    def weekly_stats(self, week_start: Optional[date] = None) -> WeeklyStats:
        """Seven daily views from *week_start* (default: this week's Monday).

        The average divides by 7 whatever the number of active days.
        """
        start = week_start if week_start is not None else week_start_for(self.today)
        days = [self.daily_stats(start + timedelta(days=offset)) for offset in range(7)]

        total = sum(d.total_focus_time for d in days)
        best = days[0]
        for day in days[1:]:
            if day.total_focus_time > best.total_focus_time:
                best = day
        active_days = sum(1 for d in days if d.total_sessions > 0)

        return WeeklyStats(
            week_start=start,
            daily_stats=days,
            total_focus_time=total,
            average_daily_focus=total / 7,
            best_day=best.date,
            consistency=active_days * 100 / 7,
        )

    def monthly_stats(self, year: Optional[int] = None, month: Optional[int] = None) -> MonthlyStats:
        """Weekly views for every Monday of the month plus growth and achievements."""
        year = year if year is not None else self.today.year
        month = month if month is not None else self.today.month

        weekly = [self.weekly_stats(start) for start in weeks_in_month(year, month)]
        total = sum(w.total_focus_time for w in weekly)
        average = total / len(weekly) if weekly else 0.0

        prev_total = self._month_focus_minutes(*previous_month(year, month))
        growth = (total - prev_total) / prev_total * 100 if prev_total > 0 else 0.0

        achievements = []
        if total >= self.CENTURY_FOCUS_MINUTES:
            achievements.append("Century Focus")
        if weekly and weekly[0].consistency > self.CONSISTENT_GROWER_PERCENT:
            achievements.append("Consistent Grower")
        if average >= self.WEEKLY_WARRIOR_MINUTES:
            achievements.append("Weekly Warrior")

        return MonthlyStats(
            month=f"{year:04d}-{month:02d}",
            weekly_stats=weekly,
            total_focus_time=total,
            average_weekly_focus=average,
            growth=growth,
            achievements=achievements,
        )

    # ------------------------------------------------------------------
    # Overall
    # ------------------------------------------------------------------

    def overall_stats(self) -> OverallStats:
        sessions = self.sessions
        total = len(sessions)
        completed = [s for s in sessions if s.completed]
        focus = [s for s in sessions if s.phase is Phase.FOCUS]
        coding_sessions = [s for s in focus if s.coding_stats is not None]

        focus_seconds = sum(s.actual_duration_seconds for s in focus)
        break_seconds = sum(s.actual_duration_seconds for s in sessions if s.phase.is_break)

        files: set[str] = set()
        language_counts: dict[str, int] = {}
        lines = keystrokes = 0
        coding_seconds = 0.0
        for session in coding_sessions:
            stats = session.coding_stats
            lines += stats.total_lines_added
            keystrokes += stats.total_keystrokes
            coding_seconds += stats.coding_time_seconds
            files.update(a.file_id for a in stats.activities)
            for lang in dict.fromkeys(stats.languages_used):
                language_counts[lang] = language_counts.get(lang, 0) + 1

        favorite_language = (
            max(language_counts, key=language_counts.__getitem__) if language_counts else None
        )
        completion_rate = _percent(len(completed), total)

        return OverallStats(
            total_sessions=total,
            total_focus_time=focus_seconds / 3600,
            total_break_time=break_seconds / 3600,
            average_session_length=(
                sum(s.actual_duration_seconds for s in sessions) / total / 60 if total else 0.0
            ),
            completion_rate=completion_rate,
            current_streak=self.current_streak(),
            longest_streak=self.longest_streak(),
            total_days_used=len(self._by_date),
            favorite_sound=_mode(s.sound_used for s in sessions if s.sound_used is not None),
            productivity=completion_rate,
            trees_grown=sum(1 for s in completed if s.phase is Phase.FOCUS) // self.FOCUS_SESSIONS_PER_TREE,
            total_lines_of_code=lines,
            total_keystrokes=keystrokes,
            total_files_edited=len(files),
            favorite_language=favorite_language,
            average_lines_per_session=lines / len(coding_sessions) if coding_sessions else 0.0,
            coding_efficiency=_percent(coding_seconds, focus_seconds),
        )

    # ------------------------------------------------------------------
    # Streaks
    # ------------------------------------------------------------------

    def current_streak(self) -> int:
        """Consecutive days with a completed session, counting back from today."""
        streak = 0
        day = self.today
        while day in self._completed_dates:
            streak += 1
            day -= timedelta(days=1)
        return streak

    def longest_streak(self) -> int:
        """Longest run of consecutive days that each have a completed session."""
        if self._longest_streak is None:
            longest = run = 0
            previous: Optional[date] = None
            for day in sorted(self._completed_dates):
                if previous is not None and (day - previous).days == 1:
                    run += 1
                else:
                    run = 1
                longest = max(longest, run)
                previous = day
            self._longest_streak = longest
        return self._longest_streak

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _month_focus_minutes(self, year: int, month: int) -> float:
        """Focus minutes over a month's weeks without building the weekly views."""
        total_seconds = 0
        for start in weeks_in_month(year, month):
            for offset in range(7):
                for session in self._by_date.get(start + timedelta(days=offset), []):
                    if session.phase is Phase.FOCUS:
                        total_seconds += session.actual_duration_seconds
        return total_seconds / 60
