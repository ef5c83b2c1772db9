"""Runtime orchestration loop for key input, engine ticks, and persistence."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from app_config import AppConfig
from history import RANGE_TODAY
from pomodoro import PhaseCompleted
from pomodoro.constants import PHASE_WORK

from .commands import CommandDispatcher, CommandOutcome
from .messages import status_line
from .state import AppState
from .ticks import TickDependencies, TickProcessor
from .ui import PresentationLike, RuntimeUIPublisher


class TerminalLike(Protocol):
    def __enter__(self) -> Any:
        ...

    def __exit__(self, exc_type, exc, traceback) -> Any:
        ...

    def read_key(self, timeout_seconds: float) -> Optional[str]:
        ...


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup and shutdown flow."""
    setup_signal_handlers: Callable[[], None]
    ignore_signals: Callable[[], None] = lambda: None


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    state: AppState
    terminal: TerminalLike
    presentation: Optional[PresentationLike]
    hooks: RuntimeHooks


class RuntimeEngine:
    """Main loop: read a key, dispatch it, tick the engine, persist, render."""
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._state = bootstrap.state

        self._ui = RuntimeUIPublisher(bootstrap.presentation)
        self._dispatcher = CommandDispatcher(self._state, logger=self._logger)
        self._tick_processor = TickProcessor(
            TickDependencies(
                engine=self._state.engine,
                alerts=self._state.alerts,
                logger=self._logger,
                ui=self._ui,
                task_name=self._state.task_name,
            )
        )
        self._tick_interval_seconds = bootstrap.app_config.runtime.tick_interval_ms / 1000.0

    @property
    def ui(self) -> RuntimeUIPublisher:
        return self._ui

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    def run(self) -> int:
        try:
            self._bootstrap.hooks.setup_signal_handlers()
            # Leaving this block restores the terminal before _shutdown flushes.
            with self._bootstrap.terminal:
                self._logger.info("Ready! Press space to start, q to quit.")
                self._publish_status()
                while True:
                    key = self._bootstrap.terminal.read_key(self._tick_interval_seconds)
                    if key is not None and self.handle_key(key).quit:
                        self._logger.info("Quit requested.")
                        return 0
                    self.step()

        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def handle_key(self, key: str) -> CommandOutcome:
        outcome = self._dispatcher.handle_key(key)
        if outcome.message:
            self._ui.publish_message(outcome.message)
        if outcome.completed is not None:
            self._tick_processor.handle_completion(outcome.completed, self._state.preferences)
            self._after_completion(outcome.completed)
        return outcome

    def step(self) -> None:
        """One loop iteration after input: tick, poll persistence, redraw."""
        event = self._tick_processor.tick(self._state.preferences)
        if event is not None:
            self._after_completion(event)
        self._state.gateway.poll()
        self._publish_status()

    def _after_completion(self, event: PhaseCompleted) -> None:
        if event.phase != PHASE_WORK or event.session_id is None:
            return
        if self._dispatcher.prompt is not None:
            return
        self._ui.publish_message(self._dispatcher.begin_session_note(event.session_id).message)

    def _publish_status(self) -> None:
        state = self._state
        preferences = state.preferences
        snapshot = state.engine.snapshot()
        goal = None
        if preferences.daily_goal_pomodoros > 0:
            goal = state.recorder.daily_goal_progress(preferences.daily_goal_pomodoros)
        streak = state.recorder.streak() if preferences.show_streak else None
        self._ui.publish_status(
            status_line(
                snapshot,
                today=state.recorder.summarize(RANGE_TODAY),
                goal=goal,
                streak=streak,
                task_name=state.task_name(snapshot.task_id),
            )
        )

    def _shutdown(self) -> None:
        presentation = self._bootstrap.presentation
        close = getattr(presentation, "close", None)
        if callable(close):
            close()

        # A second signal must not cut the flush short.
        self._bootstrap.hooks.ignore_signals()
        self._logger.info("Flushing unsaved state...")
        failed = self._state.shutdown()
        if failed:
            self._logger.error("Could not save on exit: %s", ", ".join(failed))
