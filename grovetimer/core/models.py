"""Core data models for GroveTimer.

Defines all dataclasses and enums used across the application:
- Timer: Phase, SoundType, TimerSnapshot, TimerStarted, TimerFinished
- Coding telemetry: CodingEdit, CodingActivity, SessionCodingStats
- Persistence: SessionRecord
- Reporting: DailyStats, WeeklyStats, MonthlyStats, OverallStats

Every persisted or exported model has a ``to_dict``/``from_dict`` pair that
produces JSON-compatible plain data (datetimes as ISO 8601 text, enums by
value).
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional


def _parse_dt(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _format_dt(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------

class Phase(Enum):
    """The timer mode of a run."""
    IDLE = "idle"
    FOCUS = "focus"
    SHORT_BREAK = "short-break"
    LONG_BREAK = "long-break"
    CUSTOM = "custom"

    @property
    def is_break(self) -> bool:
        return self in (Phase.SHORT_BREAK, Phase.LONG_BREAK)


class SoundType(Enum):
    """Ambient sound selected while a session runs."""
    NONE = "none"
    LOFI = "lofi"
    RAIN = "rain"


@dataclass(frozen=True)
class TimerSnapshot:
    """Point-in-time view of the timer engine."""
    running: bool
    remaining_seconds: int
    total_seconds: int
    phase: Phase

    @classmethod
    def idle(cls) -> "TimerSnapshot":
        return cls(running=False, remaining_seconds=0, total_seconds=0, phase=Phase.IDLE)

    def to_dict(self) -> dict[str, Any]:
        return {
            "running": self.running,
            "remaining_seconds": self.remaining_seconds,
            "total_seconds": self.total_seconds,
            "phase": self.phase.value,
        }


@dataclass(frozen=True)
class TimerStarted:
    """Payload of the ``started`` event."""
    phase: Phase
    duration: int


@dataclass(frozen=True)
class TimerFinished:
    """Payload of the ``finished`` event."""
    phase: Phase
    was_successful: bool


# ---------------------------------------------------------------------------
# Coding telemetry
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CodingEdit:
    """A single editing fact delivered by the coding activity feed."""
    file_id: str
    language: str
    timestamp: datetime
    lines_added: int = 0
    lines_removed: int = 0
    lines_modified: int = 0
    characters_typed: int = 0
    keystrokes: int = 1


@dataclass
class CodingActivity:
    """Per-file accumulator for one tracking window."""
    file_id: str
    language: str
    first_edit_at: datetime
    last_edit_at: datetime
    lines_added: int = 0
    lines_removed: int = 0
    lines_modified: int = 0
    characters_typed: int = 0
    keystrokes: int = 0

    @property
    def activity_score(self) -> float:
        return self.lines_added + self.lines_modified + self.keystrokes / 10

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_id": self.file_id,
            "language": self.language,
            "lines_added": self.lines_added,
            "lines_removed": self.lines_removed,
            "lines_modified": self.lines_modified,
            "characters_typed": self.characters_typed,
            "keystrokes": self.keystrokes,
            "first_edit_at": _format_dt(self.first_edit_at),
            "last_edit_at": _format_dt(self.last_edit_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CodingActivity":
        return cls(
            file_id=data["file_id"],
            language=data.get("language", ""),
            first_edit_at=_parse_dt(data["first_edit_at"]),
            last_edit_at=_parse_dt(data["last_edit_at"]),
            lines_added=data.get("lines_added", 0),
            lines_removed=data.get("lines_removed", 0),
            lines_modified=data.get("lines_modified", 0),
            characters_typed=data.get("characters_typed", 0),
            keystrokes=data.get("keystrokes", 0),
        )


@dataclass
class SessionCodingStats:
    """Aggregate of all CodingActivity records of one tracking window."""
    total_lines_added: int = 0
    total_lines_removed: int = 0
    total_lines_modified: int = 0
    total_characters_typed: int = 0
    total_keystrokes: int = 0
    files_edited: int = 0
    languages_used: list[str] = field(default_factory=list)
    most_active_file: Optional[str] = None
    coding_time_seconds: float = 0.0
    activities: list[CodingActivity] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_lines_added": self.total_lines_added,
            "total_lines_removed": self.total_lines_removed,
            "total_lines_modified": self.total_lines_modified,
            "total_characters_typed": self.total_characters_typed,
            "total_keystrokes": self.total_keystrokes,
            "files_edited": self.files_edited,
            "languages_used": list(self.languages_used),
            "most_active_file": self.most_active_file,
            "coding_time_seconds": self.coding_time_seconds,
            "activities": [a.to_dict() for a in self.activities],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionCodingStats":
        return cls(
            total_lines_added=data.get("total_lines_added", 0),
            total_lines_removed=data.get("total_lines_removed", 0),
            total_lines_modified=data.get("total_lines_modified", 0),
            total_characters_typed=data.get("total_characters_typed", 0),
            total_keystrokes=data.get("total_keystrokes", 0),
            files_edited=data.get("files_edited", 0),
            languages_used=list(data.get("languages_used") or []),
            most_active_file=data.get("most_active_file"),
            coding_time_seconds=data.get("coding_time_seconds", 0.0),
            activities=[CodingActivity.from_dict(a) for a in data.get("activities") or []],
        )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

@dataclass
class SessionRecord:
    """One timer run. Mutable while it is the draft, never touched after append."""
    id: str
    phase: Phase
    planned_duration_seconds: int
    started_at: datetime
    ended_at: datetime
    actual_duration_seconds: int = 0
    completed: bool = False
    interrupted: bool = False
    interruption_count: int = 0
    sound_used: Optional[SoundType] = None
    project_name: str = ""
    tags: list[str] = field(default_factory=list)
    coding_stats: Optional[SessionCodingStats] = None

    @property
    def start_date(self) -> date:
        return self.started_at.date()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "phase": self.phase.value,
            "planned_duration_seconds": self.planned_duration_seconds,
            "actual_duration_seconds": self.actual_duration_seconds,
            "started_at": _format_dt(self.started_at),
            "ended_at": _format_dt(self.ended_at),
            "completed": self.completed,
            "interrupted": self.interrupted,
            "interruption_count": self.interruption_count,
            "sound_used": self.sound_used.value if self.sound_used is not None else None,
            "project_name": self.project_name,
            "tags": list(self.tags),
            "coding_stats": self.coding_stats.to_dict() if self.coding_stats is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionRecord":
        sound = data.get("sound_used")
        coding = data.get("coding_stats")
        started_at = _parse_dt(data["started_at"])
        return cls(
            id=data["id"],
            phase=Phase(data["phase"]),
            planned_duration_seconds=data.get("planned_duration_seconds", 0),
            actual_duration_seconds=data.get("actual_duration_seconds", 0),
            started_at=started_at,
            ended_at=_parse_dt(data.get("ended_at")) or started_at,
            completed=bool(data.get("completed", False)),
            interrupted=bool(data.get("interrupted", False)),
            interruption_count=data.get("interruption_count", 0),
            sound_used=SoundType(sound) if sound else None,
            project_name=data.get("project_name") or "",
            tags=list(data.get("tags") or []),
            coding_stats=SessionCodingStats.from_dict(coding) if coding else None,
        )


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------

@dataclass
class DailyStats:
    """Statistics for a single calendar day. Times are in minutes."""
    date: date
    total_focus_time: float = 0.0
    total_break_time: float = 0.0
    completed_sessions: int = 0
    interrupted_sessions: int = 0
    total_sessions: int = 0
    productivity: float = 0.0
    longest_streak: int = 0
    most_used_sound: Optional[SoundType] = None
    total_lines_added: int = 0
    total_keystrokes: int = 0
    files_edited: int = 0
    languages_used: list[str] = field(default_factory=list)
    active_coding_time: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "total_focus_time": self.total_focus_time,
            "total_break_time": self.total_break_time,
            "completed_sessions": self.completed_sessions,
            "interrupted_sessions": self.interrupted_sessions,
            "total_sessions": self.total_sessions,
            "productivity": self.productivity,
            "longest_streak": self.longest_streak,
            "most_used_sound": self.most_used_sound.value if self.most_used_sound else None,
            "total_lines_added": self.total_lines_added,
            "total_keystrokes": self.total_keystrokes,
            "files_edited": self.files_edited,
            "languages_used": list(self.languages_used),
            "active_coding_time": self.active_coding_time,
        }


@dataclass
class WeeklyStats:
    """Statistics for the 7 days starting at a Monday. Times are in minutes."""
    week_start: date
    daily_stats: list[DailyStats] = field(default_factory=list)
    total_focus_time: float = 0.0
    average_daily_focus: float = 0.0
    best_day: Optional[date] = None
    consistency: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "week_start": self.week_start.isoformat(),
            "daily_stats": [d.to_dict() for d in self.daily_stats],
            "total_focus_time": self.total_focus_time,
            "average_daily_focus": self.average_daily_focus,
            "best_day": self.best_day.isoformat() if self.best_day else None,
            "consistency": self.consistency,
        }


@dataclass
class MonthlyStats:
    """Statistics for the Monday-aligned weeks of a month. Times are in minutes."""
    month: str  # YYYY-MM
    weekly_stats: list[WeeklyStats] = field(default_factory=list)
    total_focus_time: float = 0.0
    average_weekly_focus: float = 0.0
    growth: float = 0.0
    achievements: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "weekly_stats": [w.to_dict() for w in self.weekly_stats],
            "total_focus_time": self.total_focus_time,
            "average_weekly_focus": self.average_weekly_focus,
            "growth": self.growth,
            "achievements": list(self.achievements),
        }


@dataclass
class OverallStats:
    """Lifetime statistics over the whole ledger.

    Focus/break totals are in hours, the average session length in minutes.
    """
    total_sessions: int = 0
    total_focus_time: float = 0.0
    total_break_time: float = 0.0
    average_session_length: float = 0.0
    completion_rate: float = 0.0
    current_streak: int = 0
    longest_streak: int = 0
    total_days_used: int = 0
    favorite_sound: Optional[SoundType] = None
    productivity: float = 0.0
    trees_grown: int = 0
    total_lines_of_code: int = 0
    total_keystrokes: int = 0
    total_files_edited: int = 0
    favorite_language: Optional[str] = None
    average_lines_per_session: float = 0.0
    coding_efficiency: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_sessions": self.total_sessions,
            "total_focus_time": self.total_focus_time,
            "total_break_time": self.total_break_time,
            "average_session_length": self.average_session_length,
            "completion_rate": self.completion_rate,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "total_days_used": self.total_days_used,
            "favorite_sound": self.favorite_sound.value if self.favorite_sound else None,
            "productivity": self.productivity,
            "trees_grown": self.trees_grown,
            "total_lines_of_code": self.total_lines_of_code,
            "total_keystrokes": self.total_keystrokes,
            "total_files_edited": self.total_files_edited,
            "favorite_language": self.favorite_language,
            "average_lines_per_session": self.average_lines_per_session,
            "coding_efficiency": self.coding_efficiency,
        }
