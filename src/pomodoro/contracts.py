"""Protocols describing the collaborators the timer engine calls into."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol


class TimerPreferencesLike(Protocol):
    """Subset of user preferences required by the timer engine."""
    sessions_before_long_break: int
    auto_start_breaks: bool
    default_mode: str

    def duration_for_phase(self, phase: str) -> int:
        ...


class SessionSinkLike(Protocol):
    """Session recorder interface used when a phase ends or is aborted."""
    def record_phase(
        self,
        *,
        phase: str,
        duration_seconds: int,
        completed: bool,
        started_at: datetime,
        task_id: Optional[str] = None,
    ) -> Any:
        ...


class TaskLedgerLike(Protocol):
    """Task store interface used to resolve and credit the active task."""
    def get(self, task_id: str) -> Any:
        ...

    def credit_pomodoro(self, task_id: str) -> Any:
        ...
