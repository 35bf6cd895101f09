"""Tests for the JSON export and the ReportExporter class."""

import json
import os
from datetime import date, datetime, timedelta

import pytest
from docx import Document

from grovetimer.core.models import (
    CodingActivity,
    Phase,
    SessionCodingStats,
    SessionRecord,
    SoundType,
)
from grovetimer.reporting.exporter import (
    ReportExporter,
    export_all_data,
    load_sessions,
    write_json_export,
)
from grovetimer.reporting.statistics import StatisticsAggregator

TODAY = date(2025, 3, 12)


def _make_sessions() -> list[SessionRecord]:
    """A realistic mix: focus with coding stats, breaks, an interrupted run."""
    start = datetime(2025, 3, 10, 9, 0, 0)
    t = start + timedelta(minutes=3)
    coding = SessionCodingStats(
        total_lines_added=42,
        total_lines_removed=3,
        total_lines_modified=7,
        total_characters_typed=900,
        total_keystrokes=1100,
        files_edited=2,
        languages_used=["python", "markdown"],
        most_active_file="app.py",
        coding_time_seconds=512.5,
        activities=[
            CodingActivity("app.py", "python", t, t + timedelta(minutes=10),
                           lines_added=40, keystrokes=1000),
            CodingActivity("README.md", "markdown", t, t + timedelta(minutes=1),
                           lines_added=2, keystrokes=100),
        ],
    )
    return [
        SessionRecord("s1", Phase.FOCUS, 1500, start, start + timedelta(minutes=25), 1500,
                      completed=True, sound_used=SoundType.LOFI, project_name="grove",
                      tags=["api"], coding_stats=coding),
        SessionRecord("s2", Phase.SHORT_BREAK, 300, start + timedelta(minutes=25),
                      start + timedelta(minutes=30), 300, completed=True),
        SessionRecord("s3", Phase.FOCUS, 1500, start + timedelta(days=2),
                      start + timedelta(days=2, minutes=11), 660, interrupted=True,
                      interruption_count=2, sound_used=SoundType.RAIN),
        SessionRecord("s4", Phase.CUSTOM, 2700, start + timedelta(days=2, hours=2),
                      start + timedelta(days=2, hours=2, minutes=45), 2700, completed=True),
    ]


# ------------------------------------------------------------------
# export_all_data
# ------------------------------------------------------------------

class TestExportAllData:

    def test_has_all_sections(self):
        data = export_all_data(_make_sessions(), TODAY)
        assert set(data) == {"sessions", "overall", "daily", "weekly", "monthly"}
        assert [s["id"] for s in data["sessions"]] == ["s1", "s2", "s3", "s4"]
        assert data["daily"]["date"] == "2025-03-12"
        assert data["weekly"]["week_start"] == "2025-03-10"
        assert data["monthly"]["month"] == "2025-03"

    def test_is_json_serialisable(self):
        data = export_all_data(_make_sessions(), TODAY)
        assert json.loads(json.dumps(data)) == data

    def test_round_trip_reproduces_overall(self):
        data = json.loads(json.dumps(export_all_data(_make_sessions(), TODAY)))
        restored = load_sessions(data)
        recomputed = StatisticsAggregator(restored, TODAY).overall_stats().to_dict()
        assert recomputed == data["overall"]

    def test_round_trip_preserves_records(self):
        original = _make_sessions()
        data = json.loads(json.dumps(export_all_data(original, TODAY)))
        assert [SessionRecord.from_dict(s) for s in data["sessions"]] == original

    def test_empty_ledger(self):
        data = export_all_data([], TODAY)
        assert data["sessions"] == []
        assert data["overall"]["total_sessions"] == 0
        assert data["weekly"]["consistency"] == 0

    def test_from_dict_tolerates_missing_optional_fields(self):
        record = SessionRecord.from_dict({
            "id": "legacy", "phase": "focus", "started_at": "2025-03-10T09:00:00",
        })
        assert record.ended_at == record.started_at
        assert record.sound_used is None
        assert record.coding_stats is None
        assert record.tags == []


def test_write_json_export_creates_dirs(tmp_path):
    path = str(tmp_path / "nested" / "export.json")
    data = export_all_data(_make_sessions(), TODAY)
    assert write_json_export(data, path) == path
    with open(path, encoding="utf-8") as fh:
        assert json.load(fh) == data


# ------------------------------------------------------------------
# ReportExporter
# ------------------------------------------------------------------

@pytest.fixture
def aggregator():
    return StatisticsAggregator(_make_sessions(), TODAY)


class TestReportExporter:

    def test_creates_docx(self, tmp_path, aggregator):
        path = str(tmp_path / "report.docx")
        result = ReportExporter().export_weekly(
            aggregator.weekly_stats(), aggregator.overall_stats(), "Alex", path
        )
        assert result == path
        assert os.path.exists(path)

    def test_title_page_contents(self, tmp_path, aggregator):
        path = str(tmp_path / "report.docx")
        ReportExporter().export_weekly(
            aggregator.weekly_stats(), aggregator.overall_stats(), "Alex", path
        )
        text = "\n".join(p.text for p in Document(path).paragraphs)
        assert "GroveTimer Weekly Report" in text
        assert "Week of March 10, 2025" in text
        assert "Prepared for: Alex" in text

    def test_omits_user_line_when_blank(self, tmp_path, aggregator):
        path = str(tmp_path / "report.docx")
        ReportExporter().export_weekly(
            aggregator.weekly_stats(), aggregator.overall_stats(), "", path
        )
        text = "\n".join(p.text for p in Document(path).paragraphs)
        assert "Prepared for" not in text

    def test_day_table(self, tmp_path, aggregator):
        path = str(tmp_path / "report.docx")
        ReportExporter().export_weekly(
            aggregator.weekly_stats(), aggregator.overall_stats(), "Alex", path
        )
        day_table = Document(path).tables[0]
        assert len(day_table.rows) == 9  # header + 7 days + total
        assert day_table.rows[0].cells[0].text == "Day"
        assert day_table.rows[1].cells[0].text == "Monday"
        assert day_table.rows[1].cells[1].text == "25m"
        assert day_table.rows[-1].cells[0].text == "Total"
        assert day_table.rows[-1].cells[3].text == "4"

    def test_overall_table_includes_coding(self, tmp_path, aggregator):
        path = str(tmp_path / "report.docx")
        ReportExporter().export_weekly(
            aggregator.weekly_stats(), aggregator.overall_stats(), "Alex", path
        )
        overall_table = Document(path).tables[1]
        labels = [row.cells[0].text for row in overall_table.rows]
        assert "Trees grown" in labels
        assert "Favorite language" in labels

    def test_creates_parent_directories(self, tmp_path, aggregator):
        path = str(tmp_path / "a" / "b" / "report.docx")
        ReportExporter().export_weekly(
            aggregator.weekly_stats(), aggregator.overall_stats(), "Alex", path
        )
        assert os.path.exists(path)
