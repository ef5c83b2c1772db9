"""Append-only session log with calendar-aligned focus summaries."""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Iterator, Optional

from pomodoro.errors import NotFound

from .models import (
    MAX_NOTE_LENGTH,
    RANGE_ALL_TIME,
    RANGE_THIS_WEEK,
    RANGE_TODAY,
    FocusSummary,
    HistogramDay,
    Session,
    Streak,
    SummaryRange,
)


class SessionRecorder:
    """Owns the ordered session history.

    Sessions are immutable; ``annotate`` swaps in a copy carrying the note.
    """

    def __init__(
        self,
        sessions: Iterable[Session] = (),
        *,
        on_change: Optional[Callable[[], None]] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._sessions: list[Session] = list(sessions)
        self._on_change = on_change
        self._now = now_fn or (lambda: datetime.now().astimezone())
        self._logger = logger or logging.getLogger("history")

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[Session]:
        return iter(tuple(self._sessions))

    @property
    def sessions(self) -> tuple[Session, ...]:
        return tuple(self._sessions)

    def bind(self, on_change: Callable[[], None]) -> None:
        self._on_change = on_change

    def record(self, session: Session) -> None:
        self._sessions.append(session)
        self._logger.info(
            "Session recorded: phase=%s duration=%ss completed=%s task=%s",
            session.phase,
            session.duration_seconds,
            session.completed,
            session.task_id,
        )
        self._changed()

    def record_phase(
        self,
        *,
        phase: str,
        duration_seconds: int,
        completed: bool,
        started_at: datetime,
        task_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Session:
        session = Session.create(
            phase=phase,
            duration_seconds=duration_seconds,
            completed=completed,
            started_at=started_at,
            task_id=task_id,
            note=note,
        )
        self.record(session)
        return session

    def annotate(self, session_id: str, note: Optional[str]) -> Session:
        """Attach ``note`` to a recorded session; blank notes clear it."""
        text = " ".join((note or "").split())[:MAX_NOTE_LENGTH] or None
        for index, session in enumerate(self._sessions):
            if session.id == session_id:
                updated = dataclasses.replace(session, note=text)
                self._sessions[index] = updated
                self._logger.info("Session note %s: id=%s", "set" if text else "cleared", session_id)
                self._changed()
                return updated
        raise NotFound("session", session_id)

    def clear(self) -> None:
        self._sessions.clear()
        self._logger.info("Session history cleared")
        self._changed()

    def recent(self, count: int) -> list[Session]:
        if count <= 0:
            return []
        return list(reversed(self._sessions[-count:]))

    def summarize(self, summary_range: SummaryRange) -> FocusSummary:
        today = self._today()
        if summary_range == RANGE_TODAY:
            start: Optional[date] = today
        elif summary_range == RANGE_THIS_WEEK:
            start = today - timedelta(days=today.weekday())
        elif summary_range == RANGE_ALL_TIME:
            start = None
        else:
            raise ValueError(f"Unknown summary range: {summary_range!r}")

        total = 0
        count = 0
        for session in self._sessions:
            if not session.is_focus:
                continue
            if start is not None:
                day = self._local_date(session)
                if day < start or day > today:
                    continue
            total += session.duration_seconds
            count += 1
        return FocusSummary(total_focus_seconds=total, session_count=count)

    def weekly_histogram(self) -> list[HistogramDay]:
        today = self._today()
        days = [today - timedelta(days=offset) for offset in range(6, -1, -1)]
        totals = {day: 0 for day in days}
        for session in self._sessions:
            if not session.is_focus:
                continue
            day = self._local_date(session)
            if day in totals:
                totals[day] += session.duration_seconds
        return [HistogramDay(day=day, focus_seconds=totals[day]) for day in days]

    def today_pomodoro_count(self) -> int:
        return self.summarize(RANGE_TODAY).session_count

    def daily_goal_progress(self, goal: int) -> tuple[int, int]:
        return self.today_pomodoro_count(), goal

    def streak(self) -> Streak:
        focus_days = sorted(
            {self._local_date(session) for session in self._sessions if session.is_focus}
        )
        if not focus_days:
            return Streak(current=0, longest=0)

        longest = 1
        run = 1
        for previous, current in zip(focus_days, focus_days[1:]):
            run = run + 1 if current - previous == timedelta(days=1) else 1
            longest = max(longest, run)

        # A streak survives until the end of the day after the last focus day.
        today = self._today()
        day_set = set(focus_days)
        cursor = today if today in day_set else today - timedelta(days=1)
        current = 0
        while cursor in day_set:
            current += 1
            cursor -= timedelta(days=1)
        return Streak(current=current, longest=longest)

    def _today(self) -> date:
        return self._now().date()

    def _local_date(self, session: Session) -> date:
        return session.timestamp.astimezone(self._now().tzinfo).date()

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
