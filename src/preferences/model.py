"""User-editable timer preferences persisted in ``config.json``."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from pomodoro.constants import (
    DEFAULT_DAILY_GOAL_POMODOROS,
    DEFAULT_LONG_BREAK_MINUTES,
    DEFAULT_SESSIONS_BEFORE_LONG_BREAK,
    DEFAULT_SHORT_BREAK_MINUTES,
    DEFAULT_WORK_MINUTES,
    MODE_POMODORO,
    MODES,
    PHASE_CUSTOM,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    PHASE_WORK,
)
from pomodoro.errors import InvalidDuration, InvalidSetting


@dataclass(frozen=True)
class Preferences:
    """Validated preference values; every construction re-runs validation."""
    work_duration_mins: int = DEFAULT_WORK_MINUTES
    short_break_mins: int = DEFAULT_SHORT_BREAK_MINUTES
    long_break_mins: int = DEFAULT_LONG_BREAK_MINUTES
    sessions_before_long_break: int = DEFAULT_SESSIONS_BEFORE_LONG_BREAK
    default_mode: str = MODE_POMODORO
    auto_start_breaks: bool = False
    notifications_enabled: bool = True
    sound_enabled: bool = True
    theme: str = "dark"
    daily_goal_pomodoros: int = DEFAULT_DAILY_GOAL_POMODOROS
    show_streak: bool = True

    def __post_init__(self) -> None:
        for field in ("work_duration_mins", "short_break_mins", "long_break_mins"):
            value = getattr(self, field)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidDuration(f"{field} must be an integer, got: {value!r}")
            if value <= 0:
                raise InvalidDuration(f"{field} must be positive, got: {value}")

        sessions = self.sessions_before_long_break
        if isinstance(sessions, bool) or not isinstance(sessions, int) or sessions < 1:
            raise InvalidDuration(
                f"sessions_before_long_break must be >= 1, got: {sessions!r}"
            )

        goal = self.daily_goal_pomodoros
        if isinstance(goal, bool) or not isinstance(goal, int) or goal < 1:
            raise InvalidSetting(f"daily_goal_pomodoros must be >= 1, got: {goal!r}")

        if self.default_mode not in MODES:
            allowed = ", ".join(sorted(MODES))
            raise InvalidSetting(f"default_mode must be one of: {allowed}")

        if not isinstance(self.theme, str) or not self.theme.strip():
            raise InvalidSetting("theme cannot be empty")

        for field in (
            "auto_start_breaks",
            "notifications_enabled",
            "sound_enabled",
            "show_streak",
        ):
            if not isinstance(getattr(self, field), bool):
                raise InvalidSetting(f"{field} must be a boolean")

    @property
    def work_duration_seconds(self) -> int:
        return self.work_duration_mins * 60

    @property
    def short_break_seconds(self) -> int:
        return self.short_break_mins * 60

    @property
    def long_break_seconds(self) -> int:
        return self.long_break_mins * 60

    def duration_for_phase(self, phase: str) -> int:
        if phase == PHASE_WORK:
            return self.work_duration_seconds
        if phase == PHASE_SHORT_BREAK:
            return self.short_break_seconds
        if phase == PHASE_LONG_BREAK:
            return self.long_break_seconds
        if phase == PHASE_CUSTOM:
            # Timer mode starts from the work length until a custom one is set.
            return self.work_duration_seconds
        raise ValueError(f"Unknown phase: {phase!r}")

    def with_changes(self, **changes: Any) -> "Preferences":
        """Return a validated copy; raises before anything is replaced."""
        unknown = set(changes) - {field.name for field in dataclasses.fields(self)}
        if unknown:
            raise InvalidSetting(f"Unknown preference(s): {', '.join(sorted(unknown))}")
        return dataclasses.replace(self, **changes)
