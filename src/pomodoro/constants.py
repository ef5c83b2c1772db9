"""Phase, mode, and limit constants used by the timer core."""

from __future__ import annotations

DEFAULT_WORK_MINUTES = 25
DEFAULT_SHORT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15
DEFAULT_SESSIONS_BEFORE_LONG_BREAK = 4
DEFAULT_DAILY_GOAL_POMODOROS = 8

MIN_CUSTOM_DURATION_SECONDS = 60
MAX_CUSTOM_DURATION_SECONDS = 180 * 60

PHASE_WORK = "work"
PHASE_SHORT_BREAK = "short_break"
PHASE_LONG_BREAK = "long_break"
PHASE_CUSTOM = "custom"

POMODORO_PHASES: frozenset[str] = frozenset(
    {PHASE_WORK, PHASE_SHORT_BREAK, PHASE_LONG_BREAK}
)
BREAK_PHASES: frozenset[str] = frozenset({PHASE_SHORT_BREAK, PHASE_LONG_BREAK})

MODE_POMODORO = "pomodoro"
MODE_TIMER = "timer"

MODES: frozenset[str] = frozenset({MODE_POMODORO, MODE_TIMER})

SESSION_TYPE_WORK = "work"
SESSION_TYPE_BREAK = "break"

PHASE_DISPLAY_NAMES: dict[str, str] = {
    PHASE_WORK: "Work",
    PHASE_SHORT_BREAK: "Short Break",
    PHASE_LONG_BREAK: "Long Break",
    PHASE_CUSTOM: "Timer",
}

REASON_STARTED = "started"
REASON_RESUMED = "resumed"
REASON_PAUSED = "paused"
REASON_RESET = "reset"
REASON_SKIPPED = "skipped"
REASON_MODE_SWITCHED = "mode_switched"
REASON_DURATION_SET = "duration_set"
REASON_ALREADY_RUNNING = "already_running"
REASON_NOT_RUNNING = "not_running"
