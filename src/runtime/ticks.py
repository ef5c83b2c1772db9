"""Tick handling that routes phase completions to alerts and the UI."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from alerts import AlertService
from pomodoro import PhaseCompleted, TimerEngine
from pomodoro.constants import PHASE_DISPLAY_NAMES
from preferences import Preferences

from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for processing engine ticks."""
    engine: TimerEngine
    alerts: AlertService
    logger: logging.Logger
    ui: RuntimeUIPublisher
    task_name: Callable[[Optional[str]], Optional[str]]


class TickProcessor:
    """Advances the engine and handles completion side effects."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies

    def tick(self, preferences: Preferences) -> Optional[PhaseCompleted]:
        event = self._dependencies.engine.tick()
        if event is not None:
            self.handle_completion(event, preferences)
        return event

    def handle_completion(self, event: PhaseCompleted, preferences: Preferences) -> None:
        deps = self._dependencies
        task_name = deps.task_name(event.task_id)
        deps.logger.info(
            "Phase finished: %s -> %s (auto_started=%s)",
            event.phase,
            event.next_phase,
            event.auto_started,
        )
        notification = deps.alerts.handle(event, preferences, task_name=task_name)
        if notification is not None:
            deps.ui.publish_notification(notification)
        if not event.auto_started:
            label = PHASE_DISPLAY_NAMES.get(event.next_phase, event.next_phase)
            deps.ui.publish_message(f"{label} ready. Press space to start.")
