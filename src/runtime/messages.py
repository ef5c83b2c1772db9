"""Status line and command feedback text builders."""

from __future__ import annotations

from typing import Optional

from history import FocusSummary, Streak
from pomodoro import TimerSnapshot
from pomodoro.constants import (
    PHASE_DISPLAY_NAMES,
    PHASE_WORK,
    REASON_ALREADY_RUNNING,
    REASON_DURATION_SET,
    REASON_MODE_SWITCHED,
    REASON_NOT_RUNNING,
    REASON_PAUSED,
    REASON_RESET,
    REASON_RESUMED,
    REASON_SKIPPED,
    REASON_STARTED,
)


def format_duration(seconds: int) -> str:
    """Format a duration in seconds as `MM:SS` (or `H:MM:SS` past an hour)."""
    hours, remainder = divmod(max(0, int(seconds)), 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_focus_total(seconds: int) -> str:
    hours, remainder = divmod(max(0, int(seconds)), 3600)
    minutes = remainder // 60
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"


def phase_label(snapshot: TimerSnapshot) -> str:
    label = PHASE_DISPLAY_NAMES.get(snapshot.phase, snapshot.phase)
    if snapshot.mode.is_pomodoro and snapshot.phase == PHASE_WORK:
        position = snapshot.work_sessions_completed % snapshot.sessions_before_long_break
        return f"{label} {position + 1}/{snapshot.sessions_before_long_break}"
    return label


def status_line(
    snapshot: TimerSnapshot,
    *,
    today: FocusSummary,
    goal: Optional[tuple[int, int]] = None,
    streak: Optional[Streak] = None,
    task_name: Optional[str] = None,
) -> str:
    """Single-line summary of the timer and today's progress."""
    if snapshot.is_running:
        state = "running"
    elif snapshot.remaining_seconds < snapshot.duration_seconds:
        state = "paused"
    else:
        state = "ready"
    parts = [
        f"[{phase_label(snapshot)}]",
        format_duration(snapshot.remaining_seconds),
        f"({state})",
        f"today {format_focus_total(today.total_focus_seconds)}",
    ]
    if goal is not None:
        parts.append(f"goal {goal[0]}/{goal[1]}")
    if streak is not None and streak.current:
        parts.append(f"streak {streak.current}d")
    if task_name:
        parts.append(f"task: {task_name}")
    return " ".join(parts)


def action_text(reason: str, snapshot: TimerSnapshot) -> str:
    label = PHASE_DISPLAY_NAMES.get(snapshot.phase, snapshot.phase)
    if reason == REASON_STARTED:
        return f"{label} started ({format_duration(snapshot.remaining_seconds)})"
    if reason == REASON_RESUMED:
        return f"{label} resumed"
    if reason == REASON_PAUSED:
        return f"{label} paused at {format_duration(snapshot.remaining_seconds)}"
    if reason == REASON_RESET:
        return f"{label} reset"
    if reason == REASON_SKIPPED:
        return f"Skipped to {label}"
    if reason == REASON_MODE_SWITCHED:
        return "Switched to pomodoro mode" if snapshot.mode.is_pomodoro else (
            f"Switched to timer mode ({format_duration(snapshot.duration_seconds)})"
        )
    if reason == REASON_DURATION_SET:
        return f"Timer set to {format_duration(snapshot.duration_seconds)}"
    if reason == REASON_ALREADY_RUNNING:
        return "Timer is already running"
    if reason == REASON_NOT_RUNNING:
        return "Timer is not running"
    return "Timer updated"
