"""In-memory pomodoro/countdown state machine with monotonic timing."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Literal, Optional

from .clock import MonotonicClock, utc_now
from .constants import (
    MAX_CUSTOM_DURATION_SECONDS,
    MIN_CUSTOM_DURATION_SECONDS,
    MODE_POMODORO,
    MODE_TIMER,
    PHASE_CUSTOM,
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
from .contracts import SessionSinkLike, TaskLedgerLike, TimerPreferencesLike
from .cycle import next_cycle_step
from .errors import InvalidDuration, NotFound

Phase = Literal["work", "short_break", "long_break", "custom"]
TimerAction = Literal["start", "pause", "reset", "skip", "switch_mode", "set_duration"]


@dataclass(frozen=True)
class TimerMode:
    """Pomodoro cycling, or a free-form countdown of a fixed length."""
    kind: Literal["pomodoro", "timer"]
    duration_seconds: Optional[int] = None

    @classmethod
    def pomodoro(cls) -> "TimerMode":
        return cls(kind=MODE_POMODORO)

    @classmethod
    def timer(cls, duration_seconds: int) -> "TimerMode":
        return cls(kind=MODE_TIMER, duration_seconds=int(duration_seconds))

    @property
    def is_pomodoro(self) -> bool:
        return self.kind == MODE_POMODORO


@dataclass(frozen=True)
class TimerSnapshot:
    """Immutable engine snapshot exposed to the presentation layer."""
    mode: TimerMode
    phase: Phase
    duration_seconds: int
    remaining_seconds: int
    is_running: bool
    work_sessions_completed: int
    sessions_before_long_break: int
    task_id: Optional[str]

    @property
    def progress(self) -> float:
        if self.duration_seconds <= 0:
            return 0.0
        return 1.0 - (self.remaining_seconds / self.duration_seconds)


@dataclass(frozen=True)
class PhaseCompleted:
    """Emitted once when a phase runs down to zero while running."""
    phase: Phase
    next_phase: Phase
    duration_seconds: int
    completed_at: datetime
    task_id: Optional[str]
    auto_started: bool
    session_id: Optional[str] = None


@dataclass(frozen=True)
class TimerActionResult:
    """Result envelope returned after applying a user command.

    ``completed`` is set when the phase had already run out before the
    command arrived; it was finished first, exactly as ``tick()`` would.
    """
    action: TimerAction
    accepted: bool
    reason: str
    snapshot: TimerSnapshot
    completed: Optional[PhaseCompleted] = None


def validate_custom_duration(duration_seconds: int) -> int:
    value = int(duration_seconds)
    if not MIN_CUSTOM_DURATION_SECONDS <= value <= MAX_CUSTOM_DURATION_SECONDS:
        raise InvalidDuration(
            "Custom duration must be in "
            f"[{MIN_CUSTOM_DURATION_SECONDS // 60}, {MAX_CUSTOM_DURATION_SECONDS // 60}] "
            f"minutes, got: {value}s"
        )
    return value


class TimerEngine:
    """Pomodoro state machine; elapsed time comes from the clock, never tick counts."""

    def __init__(
        self,
        preferences: TimerPreferencesLike,
        *,
        recorder: SessionSinkLike,
        tasks: TaskLedgerLike,
        clock: Optional[MonotonicClock] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._preferences = preferences
        self._recorder = recorder
        self._tasks = tasks
        self._clock = clock or MonotonicClock()
        self._now = now_fn or utc_now
        self._logger = logger or logging.getLogger("pomodoro")

        if preferences.default_mode == MODE_TIMER:
            self._mode = TimerMode.timer(preferences.duration_for_phase(PHASE_CUSTOM))
            self._phase: Phase = PHASE_CUSTOM
        else:
            self._mode = TimerMode.pomodoro()
            self._phase = PHASE_WORK
        self._duration_seconds = self._duration_for(self._phase)
        self._start_instant: Optional[float] = None
        self._elapsed_before_pause = 0.0
        self._is_running = False
        self._work_sessions_completed = 0
        self._phase_started_at: Optional[datetime] = None
        self._task_id: Optional[str] = None

    @property
    def mode(self) -> TimerMode:
        return self._mode

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def work_sessions_completed(self) -> int:
        return self._work_sessions_completed

    @property
    def task_id(self) -> Optional[str]:
        return self._task_id

    def snapshot(self) -> TimerSnapshot:
        return self._snapshot(self._clock.now())

    def remaining(self) -> float:
        return self._remaining(self._clock.now())

    def start(self) -> TimerActionResult:
        now = self._clock.now()
        completed = self._complete_if_expired(now)
        if self._is_running:
            return self._result(
                "start", False, REASON_ALREADY_RUNNING, now, completed=completed
            )

        resumed = self._elapsed_before_pause > 0
        self._start_instant = now
        self._is_running = True
        if self._phase_started_at is None:
            self._phase_started_at = self._now()
        self._logger.info(
            "Timer %s: phase=%s remaining=%ss",
            "resumed" if resumed else "started",
            self._phase,
            self._ceil_remaining(now),
        )
        return self._result(
            "start",
            True,
            REASON_RESUMED if resumed else REASON_STARTED,
            now,
            completed=completed,
        )

    def pause(self) -> TimerActionResult:
        now = self._clock.now()
        completed = self._complete_if_expired(now)
        if not self._is_running:
            return self._result("pause", False, REASON_NOT_RUNNING, now, completed=completed)

        self._elapsed_before_pause = min(self._elapsed(now), float(self._duration_seconds))
        self._start_instant = None
        self._is_running = False
        self._logger.info(
            "Timer paused: phase=%s remaining=%ss",
            self._phase,
            self._ceil_remaining(now),
        )
        return self._result("pause", True, REASON_PAUSED, now, completed=completed)

    def toggle(self) -> TimerActionResult:
        if self._is_running:
            return self.pause()
        return self.start()

    def reset(self) -> TimerActionResult:
        now = self._clock.now()
        completed = self._complete_if_expired(now)
        # After a late completion the only elapsed time is unseen overshoot.
        if completed is None and self._elapsed(now) > 0:
            self._record(completed=False)
        self._clear_progress()
        self._logger.info("Timer reset: phase=%s", self._phase)
        return self._result("reset", True, REASON_RESET, now, completed=completed)

    def skip(self) -> TimerActionResult:
        now = self._clock.now()
        completed = self._complete_if_expired(now)
        if completed is not None:
            # The phase being skipped already ended; completing it moved on.
            return self._result("skip", True, REASON_SKIPPED, now, completed=completed)

        if self._elapsed(now) > 0 and self._remaining(now) > 0:
            self._record(completed=False)

        skipped = self._phase
        if self._mode.is_pomodoro:
            self._advance(started_at=now)
        else:
            self._clear_progress()
        self._logger.info("Timer skipped: phase=%s next=%s", skipped, self._phase)
        return self._result("skip", True, REASON_SKIPPED, now)

    def tick(self) -> Optional[PhaseCompleted]:
        """Advance time-based state; returns an event on natural completion."""
        return self._complete_if_expired(self._clock.now())

    def _complete_if_expired(self, now: float) -> Optional[PhaseCompleted]:
        if not self._is_running or self._remaining(now) > 0:
            return None

        # Chain the next phase from the exact instant this one ran out.
        overshoot = max(0.0, self._elapsed(now) - self._duration_seconds)
        ended_at = now - overshoot
        completed_phase = self._phase
        duration = self._duration_seconds
        task_id = self._resolve_task()

        session = self._record(completed=True, task_id=task_id)
        if completed_phase == PHASE_WORK and task_id is not None:
            self._tasks.credit_pomodoro(task_id)

        completed_at = self._now() - timedelta(seconds=overshoot)
        if self._mode.is_pomodoro:
            self._advance(started_at=ended_at, wall_started_at=completed_at)
        else:
            self._clear_progress()

        self._logger.info(
            "Phase completed: phase=%s next=%s task=%s",
            completed_phase,
            self._phase,
            task_id,
        )
        return PhaseCompleted(
            phase=completed_phase,
            next_phase=self._phase,
            duration_seconds=duration,
            completed_at=completed_at,
            task_id=task_id,
            auto_started=self._is_running,
            session_id=getattr(session, "id", None),
        )

    def switch_mode(self, duration_seconds: Optional[int] = None) -> TimerActionResult:
        """Toggle Pomodoro <-> Timer, discarding in-progress time unrecorded."""
        if self._mode.is_pomodoro:
            if duration_seconds is None:
                custom = self._preferences.duration_for_phase(PHASE_CUSTOM)
            else:
                custom = validate_custom_duration(duration_seconds)
            self._mode = TimerMode.timer(custom)
            self._phase = PHASE_CUSTOM
        else:
            self._mode = TimerMode.pomodoro()
            self._phase = PHASE_WORK
            self._work_sessions_completed = 0
        self._duration_seconds = self._duration_for(self._phase)
        self._clear_progress()
        now = self._clock.now()
        self._logger.info("Timer mode switched: mode=%s", self._mode.kind)
        return self._result("switch_mode", True, REASON_MODE_SWITCHED, now)

    def set_custom_duration(self, duration_seconds: int) -> TimerActionResult:
        if self._mode.is_pomodoro:
            raise InvalidDuration("Custom durations are only available in timer mode")
        value = validate_custom_duration(duration_seconds)
        self._mode = TimerMode.timer(value)
        self._duration_seconds = value
        now = self._clock.now()
        self._logger.info("Custom timer duration set: %ss", value)
        return self._result("set_duration", True, REASON_DURATION_SET, now)

    def associate_task(self, task_id: str) -> None:
        if self._tasks.get(task_id) is None:
            raise NotFound("task", task_id)
        self._task_id = task_id

    def detach_task(self, task_id: Optional[str] = None) -> None:
        if task_id is None or task_id == self._task_id:
            self._task_id = None

    def apply_preferences(self, preferences: TimerPreferencesLike) -> None:
        self._preferences = preferences
        if (
            self._mode.is_pomodoro
            and not self._is_running
            and self._elapsed_before_pause == 0
        ):
            self._duration_seconds = self._duration_for(self._phase)

    def reset_cycle(self) -> None:
        if self._mode.is_pomodoro:
            self._phase = PHASE_WORK
        self._work_sessions_completed = 0
        self._duration_seconds = self._duration_for(self._phase)
        self._clear_progress()

    def _advance(
        self,
        *,
        started_at: float,
        wall_started_at: Optional[datetime] = None,
    ) -> None:
        step = next_cycle_step(
            self._phase,
            self._work_sessions_completed,
            self._preferences.sessions_before_long_break,
        )
        self._phase = step.next_phase  # type: ignore[assignment]
        self._work_sessions_completed = step.work_sessions_completed
        self._duration_seconds = self._duration_for(self._phase)
        self._clear_progress()

        if self._preferences.auto_start_breaks or self._phase == PHASE_WORK:
            self._start_instant = started_at
            self._is_running = True
            self._phase_started_at = wall_started_at or self._now()

    def _record(self, *, completed: bool, task_id: Optional[str] = None) -> Any:
        if task_id is None:
            task_id = self._resolve_task()
        return self._recorder.record_phase(
            phase=self._phase,
            duration_seconds=self._duration_seconds,
            completed=completed,
            started_at=self._phase_started_at or self._now(),
            task_id=task_id,
        )

    def _resolve_task(self) -> Optional[str]:
        if self._task_id is None:
            return None
        if self._tasks.get(self._task_id) is None:
            self._logger.warning(
                "Associated task no longer exists, recording unassociated: id=%s",
                self._task_id,
            )
            self._task_id = None
        return self._task_id

    def _clear_progress(self) -> None:
        self._start_instant = None
        self._elapsed_before_pause = 0.0
        self._is_running = False
        self._phase_started_at = None

    def _duration_for(self, phase: Phase) -> int:
        if phase == PHASE_CUSTOM and self._mode.duration_seconds is not None:
            return self._mode.duration_seconds
        return int(self._preferences.duration_for_phase(phase))

    def _elapsed(self, now: float) -> float:
        running = 0.0
        if self._is_running and self._start_instant is not None:
            running = max(0.0, now - self._start_instant)
        return self._elapsed_before_pause + running

    def _remaining(self, now: float) -> float:
        return max(0.0, self._duration_seconds - self._elapsed(now))

    def _ceil_remaining(self, now: float) -> int:
        remaining = int(math.ceil(self._remaining(now)))
        return max(0, min(self._duration_seconds, remaining))

    def _snapshot(self, now: float) -> TimerSnapshot:
        return TimerSnapshot(
            mode=self._mode,
            phase=self._phase,
            duration_seconds=self._duration_seconds,
            remaining_seconds=self._ceil_remaining(now),
            is_running=self._is_running,
            work_sessions_completed=self._work_sessions_completed,
            sessions_before_long_break=self._preferences.sessions_before_long_break,
            task_id=self._task_id,
        )

    def _result(
        self,
        action: TimerAction,
        accepted: bool,
        reason: str,
        now: float,
        *,
        completed: Optional[PhaseCompleted] = None,
    ) -> TimerActionResult:
        return TimerActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self._snapshot(now),
            completed=completed,
        )
