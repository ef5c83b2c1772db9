"""Owned application aggregate wiring the engine, stores, and persistence."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from alerts import AlertService
from history import SessionRecorder
from pomodoro import MonotonicClock, TimerEngine
from preferences import Preferences
from storage import (
    ENTITY_CONFIG,
    ENTITY_SESSIONS,
    ENTITY_TAGS,
    ENTITY_TASKS,
    PersistenceGateway,
    preferences_to_document,
    sessions_to_document,
    tags_to_document,
    tasks_to_document,
)
from tasks import TagLedger, Task, TaskStore


@dataclass
class AppState:
    """Single owner of all mutable application state."""
    preferences: Preferences
    engine: TimerEngine
    recorder: SessionRecorder
    tasks: TaskStore
    tag_ledger: TagLedger
    gateway: PersistenceGateway
    alerts: AlertService
    logger: logging.Logger

    def update_preferences(self, **changes: Any) -> Preferences:
        """Validate, apply, and persist a preference change synchronously."""
        updated = self.preferences.with_changes(**changes)
        self.preferences = updated
        self.engine.apply_preferences(updated)
        if not self.gateway.save_preferences():
            self.logger.warning("Preferences changed but not yet saved; will retry")
        self.logger.info("Preferences updated: %s", ", ".join(sorted(changes)))
        return updated

    def task_name(self, task_id: Optional[str]) -> Optional[str]:
        if task_id is None:
            return None
        task = self.tasks.get(task_id)
        return task.name if task is not None else None

    def add_task(self, raw_name: str) -> Task:
        """Add a task and teach the tag ledger the tags it carries."""
        task = self.tasks.add(raw_name)
        self.tag_ledger.record_usage(task.tags)
        return task

    def clear_all_data(self) -> None:
        self.recorder.clear()
        self.tasks.clear()
        self.tag_ledger.clear()
        self.engine.reset_cycle()
        self.logger.info("All sessions, tasks and tags cleared")

    def shutdown(self) -> list[str]:
        return self.gateway.flush()


def build_app_state(
    gateway: PersistenceGateway,
    *,
    alerts: Optional[AlertService] = None,
    clock: Optional[MonotonicClock] = None,
    now_fn: Optional[Callable[[], datetime]] = None,
    local_now_fn: Optional[Callable[[], datetime]] = None,
    logger: Optional[logging.Logger] = None,
) -> AppState:
    """Load persisted state and connect every store to the gateway."""
    loaded = gateway.load()

    recorder = SessionRecorder(
        loaded.sessions,
        on_change=lambda: gateway.mark_dirty(ENTITY_SESSIONS),
        now_fn=local_now_fn,
    )
    tasks = TaskStore(
        loaded.tasks,
        on_change=lambda: gateway.mark_dirty(ENTITY_TASKS),
        now_fn=now_fn,
    )
    tag_ledger = TagLedger(
        loaded.tags,
        on_change=lambda: gateway.mark_dirty(ENTITY_TAGS),
        now_fn=local_now_fn,
    )
    tag_ledger.cleanup()
    engine = TimerEngine(
        loaded.preferences,
        recorder=recorder,
        tasks=tasks,
        clock=clock,
        now_fn=now_fn,
    )
    tasks.add_delete_listener(engine.detach_task)

    state = AppState(
        preferences=loaded.preferences,
        engine=engine,
        recorder=recorder,
        tasks=tasks,
        tag_ledger=tag_ledger,
        gateway=gateway,
        alerts=alerts or AlertService(),
        logger=logger or logging.getLogger("runtime"),
    )
    gateway.attach(ENTITY_CONFIG, lambda: preferences_to_document(state.preferences))
    gateway.attach(ENTITY_TASKS, lambda: tasks_to_document(list(state.tasks)))
    gateway.attach(ENTITY_SESSIONS, lambda: sessions_to_document(list(state.recorder)))
    gateway.attach(ENTITY_TAGS, lambda: tags_to_document(list(state.tag_ledger)))
    return state
