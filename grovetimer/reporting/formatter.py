"""Text formatter for GroveTimer statistics.

Renders daily, weekly, monthly and overall statistics as aligned plain-text
reports, plus the one-line status summary shown next to the timer.
"""

from grovetimer.core.models import DailyStats, MonthlyStats, OverallStats, WeeklyStats


class TextFormatter:
    """Formats statistics as human-readable plain text."""

    @staticmethod
    def format_duration(minutes: float) -> str:
        """Format a number of minutes as 'Xh Ym' (e.g., '2h 15m').

        Truncates to whole minutes. Returns '0m' for zero/negative durations.
        """
        total_minutes = max(0, int(minutes))
        hours = total_minutes // 60
        minutes_part = total_minutes % 60

        if hours == 0:
            return f"{minutes_part}m"
        return f"{hours}h {minutes_part}m"

    @staticmethod
    def format_status_line(daily: DailyStats, overall: OverallStats) -> str:
        """One-line summary: today's focus, completed sessions, streak and trees."""
        parts = [
            f"Today: {TextFormatter.format_duration(daily.total_focus_time)} focused",
            f"{daily.completed_sessions} completed",
            f"Streak: {overall.current_streak}d",
            f"Trees: {overall.trees_grown}",
        ]
        if daily.total_lines_added:
            parts.append(f"{daily.total_lines_added} lines")
        return " | ".join(parts)

    @staticmethod
    def _format_day_table(days: list[DailyStats]) -> str:
        """Render one row per day with aligned columns.

        Returns lines like:
          Day          Focus   Break  Sessions  Done
          ───────────────────────────────────────────
          Mon 03      1h 40m     15m         5     4
        """
        rows = [
            (
                d.date.strftime("%a %d"),
                TextFormatter.format_duration(d.total_focus_time),
                TextFormatter.format_duration(d.total_break_time),
                str(d.total_sessions),
                str(d.completed_sessions),
            )
            for d in days
        ]
        headers = ("Day", "Focus", "Break", "Sessions", "Done")
        widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(headers)]

        header = f"  {headers[0]:<{widths[0]}}" + "".join(
            f"  {h:>{w}}" for h, w in zip(headers[1:], widths[1:])
        )
        separator = "  " + "─" * (len(header) - 2)
        lines = [header, separator]
        for row in rows:
            lines.append(
                f"  {row[0]:<{widths[0]}}"
                + "".join(f"  {v:>{w}}" for v, w in zip(row[1:], widths[1:]))
            )
        return "\n".join(lines) + "\n"

    @staticmethod
    def format_daily(stats: DailyStats) -> str:
        """Render a daily statistics block as plain text."""
        fd = TextFormatter.format_duration
        lines = [
            f"Daily Stats: {stats.date.strftime('%A, %B %d, %Y')}",
            "",
            f"  Focus time:      {fd(stats.total_focus_time)}",
            f"  Break time:      {fd(stats.total_break_time)}",
            f"  Sessions:        {stats.completed_sessions} completed, "
            f"{stats.interrupted_sessions} interrupted, {stats.total_sessions} total",
            f"  Productivity:    {stats.productivity:.0f}%",
            f"  Longest streak:  {stats.longest_streak} days",
        ]
        if stats.most_used_sound is not None:
            lines.append(f"  Sound:           {stats.most_used_sound.value}")
        if stats.total_keystrokes or stats.files_edited:
            lines.extend([
                "",
                "  Coding:",
                f"    Lines added:   {stats.total_lines_added}",
                f"    Keystrokes:    {stats.total_keystrokes}",
                f"    Files edited:  {stats.files_edited}",
                f"    Languages:     {', '.join(stats.languages_used) or '-'}",
                f"    Active time:   {fd(stats.active_coding_time)}",
            ])
        return "\n".join(lines) + "\n"

    @staticmethod
    def format_weekly(stats: WeeklyStats) -> str:
        """Render a weekly statistics block with a per-day table."""
        fd = TextFormatter.format_duration
        parts: list[str] = []
        parts.append(f"Weekly Stats: week of {stats.week_start.strftime('%B %d, %Y')}\n")
        parts.append(f"\n  Total focus:     {fd(stats.total_focus_time)}\n")
        parts.append(f"  Daily average:   {fd(stats.average_daily_focus)}\n")
        if stats.best_day is not None and stats.total_focus_time > 0:
            parts.append(f"  Best day:        {stats.best_day.strftime('%A')}\n")
        parts.append(f"  Consistency:     {stats.consistency:.0f}%\n")
        parts.append("\nDaily Breakdown:\n")
        parts.append(TextFormatter._format_day_table(stats.daily_stats))
        return "".join(parts)

    @staticmethod
    def format_monthly(stats: MonthlyStats) -> str:
        """Render a monthly statistics block with one line per week."""
        fd = TextFormatter.format_duration
        lines = [
            f"Monthly Stats: {stats.month}",
            "",
            f"  Total focus:     {fd(stats.total_focus_time)}",
            f"  Weekly average:  {fd(stats.average_weekly_focus)}",
            f"  Growth:          {stats.growth:+.1f}%",
            "",
            "  Weeks:",
        ]
        for week in stats.weekly_stats:
            lines.append(
                f"    {week.week_start.strftime('%b %d')}:  {fd(week.total_focus_time):>8}"
                f"  ({week.consistency:.0f}% consistent)"
            )
        if stats.achievements:
            lines.append("")
            lines.append("  Achievements: " + ", ".join(stats.achievements))
        return "\n".join(lines) + "\n"

    @staticmethod
    def format_overall(stats: OverallStats) -> str:
        """Render lifetime statistics, including the coding section when present."""
        lines = [
            "Overall Stats",
            "",
            f"  Sessions:        {stats.total_sessions}",
            f"  Focus time:      {stats.total_focus_time:.1f}h",
            f"  Break time:      {stats.total_break_time:.1f}h",
            f"  Avg session:     {stats.average_session_length:.1f}m",
            f"  Completion rate: {stats.completion_rate:.0f}%",
            f"  Current streak:  {stats.current_streak} days",
            f"  Longest streak:  {stats.longest_streak} days",
            f"  Days used:       {stats.total_days_used}",
            f"  Trees grown:     {stats.trees_grown}",
        ]
        if stats.favorite_sound is not None:
            lines.append(f"  Favorite sound:  {stats.favorite_sound.value}")
        if stats.total_keystrokes or stats.total_files_edited:
            lines.extend([
                "",
                "  Coding:",
                f"    Lines of code:     {stats.total_lines_of_code}",
                f"    Keystrokes:        {stats.total_keystrokes}",
                f"    Files edited:      {stats.total_files_edited}",
                f"    Favorite language: {stats.favorite_language or '-'}",
                f"    Lines / session:   {stats.average_lines_per_session:.1f}",
                f"    Coding efficiency: {stats.coding_efficiency:.0f}%",
            ])
        return "\n".join(lines) + "\n"
