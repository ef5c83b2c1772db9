"""Notification text for completed phases."""

from __future__ import annotations

from typing import Optional

from pomodoro.constants import (
    PHASE_CUSTOM,
    PHASE_DISPLAY_NAMES,
    PHASE_LONG_BREAK,
    PHASE_SHORT_BREAK,
    PHASE_WORK,
)

_TITLES = {
    PHASE_WORK: "Work session complete!",
    PHASE_SHORT_BREAK: "Short break over!",
    PHASE_LONG_BREAK: "Long break over!",
    PHASE_CUSTOM: "Timer finished!",
}


def completion_title(phase: str) -> str:
    return _TITLES.get(phase, "Phase complete!")


def completion_body(next_phase: str, task_name: Optional[str]) -> str:
    if task_name:
        return f"Task: {task_name}"
    if next_phase == PHASE_CUSTOM:
        return "Countdown complete."
    return f"Up next: {PHASE_DISPLAY_NAMES.get(next_phase, next_phase)}"
