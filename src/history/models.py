"""Immutable session records and aggregate result types."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Literal, Optional

from pomodoro.constants import (
    BREAK_PHASES,
    SESSION_TYPE_BREAK,
    SESSION_TYPE_WORK,
)

SummaryRange = Literal["today", "this_week", "all_time"]

RANGE_TODAY: SummaryRange = "today"
RANGE_THIS_WEEK: SummaryRange = "this_week"
RANGE_ALL_TIME: SummaryRange = "all_time"

MAX_NOTE_LENGTH = 60


@dataclass(frozen=True)
class Session:
    """One completed or aborted timer interval."""
    id: str
    timestamp: datetime
    phase: str
    duration_seconds: int
    completed: bool
    task_id: Optional[str] = None
    note: Optional[str] = None

    @property
    def session_type(self) -> str:
        if self.phase in BREAK_PHASES:
            return SESSION_TYPE_BREAK
        return SESSION_TYPE_WORK

    @property
    def is_focus(self) -> bool:
        return self.completed and self.session_type == SESSION_TYPE_WORK

    @classmethod
    def create(
        cls,
        *,
        phase: str,
        duration_seconds: int,
        completed: bool,
        started_at: datetime,
        task_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> "Session":
        if started_at.tzinfo is None:
            started_at = started_at.replace(tzinfo=timezone.utc)
        return cls(
            id=str(uuid.uuid4()),
            timestamp=started_at.astimezone(timezone.utc),
            phase=phase,
            duration_seconds=int(duration_seconds),
            completed=completed,
            task_id=task_id,
            note=note,
        )


@dataclass(frozen=True)
class FocusSummary:
    """Focus totals over completed work sessions in a range."""
    total_focus_seconds: int
    session_count: int


@dataclass(frozen=True)
class Streak:
    """Consecutive-day streaks of completed work sessions."""
    current: int
    longest: int


@dataclass(frozen=True)
class HistogramDay:
    day: date
    focus_seconds: int

    @property
    def label(self) -> str:
        return self.day.strftime("%a")
