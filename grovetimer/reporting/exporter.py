"""Data and report export for GroveTimer.

``export_all_data`` bundles the raw ledger with every statistics view as
JSON-compatible data; :class:`ReportExporter` renders a weekly Word (.docx)
report using python-docx.
"""

import json
import logging
import os
from datetime import date
from typing import Any, Optional, Sequence

from grovetimer.core.models import OverallStats, SessionRecord, WeeklyStats
from grovetimer.reporting.formatter import TextFormatter
from grovetimer.reporting.statistics import StatisticsAggregator

logger = logging.getLogger(__name__)


def export_all_data(sessions: Sequence[SessionRecord], today: Optional[date] = None) -> dict[str, Any]:
    """Return the sessions plus overall, daily, weekly and monthly stats.

    The ``sessions`` entries round-trip through :meth:`SessionRecord.from_dict`;
    recomputing overall stats from them with the same *today* reproduces
    ``overall``.
    """
    aggregator = StatisticsAggregator(sessions, today)
    return {
        "sessions": [s.to_dict() for s in aggregator.sessions],
        "overall": aggregator.overall_stats().to_dict(),
        "daily": aggregator.daily_stats().to_dict(),
        "weekly": aggregator.weekly_stats().to_dict(),
        "monthly": aggregator.monthly_stats().to_dict(),
    }


def load_sessions(data: dict[str, Any]) -> list[SessionRecord]:
    """Rebuild session records from an ``export_all_data`` document."""
    return [SessionRecord.from_dict(raw) for raw in data.get("sessions", [])]


def write_json_export(data: dict[str, Any], output_path: str) -> str:
    """Write an export document to *output_path* as indented JSON."""
    parent_dir = os.path.dirname(output_path)
    if parent_dir:
        os.makedirs(parent_dir, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2, ensure_ascii=False)
        fh.write("\n")
    logger.info("Exported %d sessions to %s", len(data.get("sessions", [])), output_path)
    return output_path


class ReportExporter:
    """Exports weekly statistics to a formatted Word document (.docx)."""

    def export_weekly(
        self,
        weekly: WeeklyStats,
        overall: OverallStats,
        user_name: str,
        output_path: str,
    ) -> str:
        """Generate a .docx file from weekly statistics.

        Args:
            weekly: The week to report on.
            overall: Lifetime stats shown after the weekly breakdown.
            user_name: The user's configured display name.
            output_path: File path for the generated .docx file.

        Returns:
            The path to the generated file.

        Raises:
            ImportError: If python-docx is not installed.
        """
        try:
            from docx import Document
        except ImportError:
            raise ImportError(
                "python-docx is required for report export. "
                "Install it with: pip install python-docx"
            )

        parent_dir = os.path.dirname(output_path)
        if parent_dir:
            os.makedirs(parent_dir, exist_ok=True)

        doc = Document()

        self._add_title_page(doc, weekly, user_name)

        doc.add_heading("Weekly Summary", level=1)
        fd = TextFormatter.format_duration
        doc.add_paragraph(f"Total focus: {fd(weekly.total_focus_time)}")
        doc.add_paragraph(f"Daily average: {fd(weekly.average_daily_focus)}")
        doc.add_paragraph(f"Consistency: {weekly.consistency:.0f}%")
        if weekly.best_day is not None and weekly.total_focus_time > 0:
            doc.add_paragraph(f"Best day: {weekly.best_day.strftime('%A, %B %d')}")

        doc.add_heading("Daily Breakdown", level=1)
        self._add_day_table(doc, weekly)

        doc.add_heading("Overall", level=1)
        self._add_overall_table(doc, overall)

        doc.save(output_path)
        logger.info("Weekly report written to %s", output_path)
        return output_path

    def _add_title_page(self, doc, weekly: WeeklyStats, user_name: str) -> None:
        """Add a title page with report title, week and user name."""
        from docx.enum.text import WD_ALIGN_PARAGRAPH
        from docx.shared import Pt

        title_para = doc.add_paragraph()
        title_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = title_para.add_run("GroveTimer Weekly Report")
        run.bold = True
        run.font.size = Pt(24)

        date_para = doc.add_paragraph()
        date_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = date_para.add_run(f"Week of {weekly.week_start.strftime('%B %d, %Y')}")
        run.font.size = Pt(14)

        if user_name:
            name_para = doc.add_paragraph()
            name_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
            run = name_para.add_run(f"Prepared for: {user_name}")
            run.font.size = Pt(12)

        doc.add_page_break()

    def _add_day_table(self, doc, weekly: WeeklyStats) -> None:
        fd = TextFormatter.format_duration
        days = weekly.daily_stats

        # Header row + one row per day + total row
        table = doc.add_table(rows=1 + len(days) + 1, cols=5)
        table.style = "Light Grid Accent 1"

        for cell, text in zip(
            table.rows[0].cells, ("Day", "Focus", "Break", "Sessions", "Productivity")
        ):
            cell.text = text

        for i, day in enumerate(days, start=1):
            cells = table.rows[i].cells
            cells[0].text = day.date.strftime("%A")
            cells[1].text = fd(day.total_focus_time)
            cells[2].text = fd(day.total_break_time)
            cells[3].text = str(day.total_sessions)
            cells[4].text = f"{day.productivity:.0f}%"

        total_row = table.rows[-1].cells
        total_row[0].text = "Total"
        total_row[1].text = fd(weekly.total_focus_time)
        total_row[2].text = fd(sum(d.total_break_time for d in days))
        total_row[3].text = str(sum(d.total_sessions for d in days))
        total_row[4].text = ""

        self._bold_row(table.rows[0])
        self._bold_row(table.rows[-1])
        doc.add_paragraph()

    def _add_overall_table(self, doc, overall: OverallStats) -> None:
        rows = [
            ("Sessions", str(overall.total_sessions)),
            ("Focus time", f"{overall.total_focus_time:.1f}h"),
            ("Completion rate", f"{overall.completion_rate:.0f}%"),
            ("Current streak", f"{overall.current_streak} days"),
            ("Longest streak", f"{overall.longest_streak} days"),
            ("Trees grown", str(overall.trees_grown)),
        ]
        if overall.total_lines_of_code or overall.total_keystrokes:
            rows.extend([
                ("Lines of code", str(overall.total_lines_of_code)),
                ("Favorite language", overall.favorite_language or "-"),
                ("Coding efficiency", f"{overall.coding_efficiency:.0f}%"),
            ])

        table = doc.add_table(rows=len(rows), cols=2)
        table.style = "Light Grid Accent 1"
        for row, (label, value) in zip(table.rows, rows):
            row.cells[0].text = label
            row.cells[1].text = value
        doc.add_paragraph()

    @staticmethod
    def _bold_row(row) -> None:
        for cell in row.cells:
            for paragraph in cell.paragraphs:
                for run in paragraph.runs:
                    run.bold = True
