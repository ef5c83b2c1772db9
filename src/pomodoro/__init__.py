from .clock import MonotonicClock, utc_now
from .cycle import CycleStep, next_cycle_step
from .errors import (
    CorruptState,
    InvalidDuration,
    InvalidSetting,
    InvalidTaskName,
    IoFailure,
    NotFound,
    PomodoroError,
)
from .service import (
    Phase,
    PhaseCompleted,
    TimerAction,
    TimerActionResult,
    TimerEngine,
    TimerMode,
    TimerSnapshot,
    validate_custom_duration,
)

__all__ = [
    "CorruptState",
    "CycleStep",
    "InvalidDuration",
    "InvalidSetting",
    "InvalidTaskName",
    "IoFailure",
    "MonotonicClock",
    "NotFound",
    "Phase",
    "PhaseCompleted",
    "PomodoroError",
    "TimerAction",
    "TimerActionResult",
    "TimerEngine",
    "TimerMode",
    "TimerSnapshot",
    "next_cycle_step",
    "utc_now",
    "validate_custom_duration",
]
