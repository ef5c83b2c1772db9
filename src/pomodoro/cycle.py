"""Pure auto-cycle transition used after a pomodoro phase ends."""

from __future__ import annotations

from dataclasses import dataclass

from .constants import PHASE_LONG_BREAK, PHASE_SHORT_BREAK, PHASE_WORK


@dataclass(frozen=True)
class CycleStep:
    """Next phase plus the updated work-session counter."""
    next_phase: str
    work_sessions_completed: int


def next_cycle_step(
    phase: str,
    work_sessions_completed: int,
    sessions_before_long_break: int,
) -> CycleStep:
    """Return the phase that follows ``phase`` in the pomodoro cycle.

    The counter comparison uses ``>=`` so lowering ``sessions_before_long_break``
    below the current count triggers a long break on the next work completion.
    """
    if phase == PHASE_WORK:
        completed = work_sessions_completed + 1
        if completed >= sessions_before_long_break:
            return CycleStep(next_phase=PHASE_LONG_BREAK, work_sessions_completed=0)
        return CycleStep(next_phase=PHASE_SHORT_BREAK, work_sessions_completed=completed)

    if phase in (PHASE_SHORT_BREAK, PHASE_LONG_BREAK):
        return CycleStep(
            next_phase=PHASE_WORK,
            work_sessions_completed=work_sessions_completed,
        )

    raise ValueError(f"Phase {phase!r} does not take part in the pomodoro cycle")
