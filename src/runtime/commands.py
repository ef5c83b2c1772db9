"""Key-to-action dispatch against the owned application state."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from history import MAX_NOTE_LENGTH
from pomodoro import PhaseCompleted, PomodoroError, TimerActionResult

from .messages import action_text, format_duration
from .state import AppState

CUSTOM_DURATION_STEP_SECONDS = 5 * 60

KEY_ENTER = "\n"
KEY_ESCAPE = "\x1b"
KEY_BACKSPACE = "\x7f"
KEY_TAB = "\t"

PROMPT_TASK = "task"
PROMPT_NOTE = "note"

ACTION_TOGGLE = "toggle"
ACTION_RESET = "reset"
ACTION_SKIP = "skip"
ACTION_SWITCH_MODE = "switch_mode"
ACTION_DURATION_UP = "duration_up"
ACTION_DURATION_DOWN = "duration_down"
ACTION_SELECT_NEXT = "select_next"
ACTION_SELECT_PREVIOUS = "select_previous"
ACTION_ADD_TASK = "add_task"
ACTION_DELETE_TASK = "delete_task"
ACTION_TOGGLE_TASK = "toggle_task"
ACTION_CLEAR_COMPLETED = "clear_completed"
ACTION_FOCUS_TASK = "focus_task"
ACTION_SESSION_NOTE = "session_note"
ACTION_QUIT = "quit"

KEY_BINDINGS: dict[str, str] = {
    " ": ACTION_TOGGLE,
    "r": ACTION_RESET,
    "s": ACTION_SKIP,
    "n": ACTION_SKIP,
    "m": ACTION_SWITCH_MODE,
    "+": ACTION_DURATION_UP,
    "=": ACTION_DURATION_UP,
    "-": ACTION_DURATION_DOWN,
    "j": ACTION_SELECT_NEXT,
    "k": ACTION_SELECT_PREVIOUS,
    "a": ACTION_ADD_TASK,
    "d": ACTION_DELETE_TASK,
    KEY_ENTER: ACTION_TOGGLE_TASK,
    "\r": ACTION_TOGGLE_TASK,
    "c": ACTION_CLEAR_COMPLETED,
    "t": ACTION_FOCUS_TASK,
    "q": ACTION_QUIT,
}


def _partial_tag(buffer: str) -> str:
    """Tag fragment being typed at the end of ``buffer``, without its ``#``."""
    if not buffer or buffer[-1].isspace():
        return ""
    word = buffer.split()[-1]
    return word[1:] if word.startswith("#") else ""


@dataclass(frozen=True)
class CommandOutcome:
    """What a key press did; ``message`` is shown to the user when set.

    ``completed`` carries a phase that ran out just before the command.
    """
    action: Optional[str]
    accepted: bool
    message: str = ""
    quit: bool = False
    completed: Optional[PhaseCompleted] = None


class CommandDispatcher:
    """Routes key presses to timer and task operations.

    While a prompt is open every key edits the prompt instead of acting.
    """
    def __init__(
        self,
        state: AppState,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._state = state
        self._logger = logger or logging.getLogger("runtime")
        self._selected_index = 0
        self._prompt: Optional[str] = None
        self._input_buffer: Optional[str] = None
        self._note_session_id: Optional[str] = None
        self._handlers: dict[str, Callable[[], CommandOutcome]] = {
            ACTION_TOGGLE: self._toggle,
            ACTION_RESET: self._reset,
            ACTION_SKIP: self._skip,
            ACTION_SWITCH_MODE: self._switch_mode,
            ACTION_DURATION_UP: lambda: self._adjust_duration(CUSTOM_DURATION_STEP_SECONDS),
            ACTION_DURATION_DOWN: lambda: self._adjust_duration(-CUSTOM_DURATION_STEP_SECONDS),
            ACTION_SELECT_NEXT: lambda: self._move_selection(1),
            ACTION_SELECT_PREVIOUS: lambda: self._move_selection(-1),
            ACTION_ADD_TASK: self._begin_task_input,
            ACTION_DELETE_TASK: self._delete_task,
            ACTION_TOGGLE_TASK: self._toggle_task,
            ACTION_CLEAR_COMPLETED: self._clear_completed,
            ACTION_FOCUS_TASK: self._focus_task,
            ACTION_QUIT: lambda: CommandOutcome(ACTION_QUIT, True, quit=True),
        }

    @property
    def selected_index(self) -> int:
        return self._selected_index

    @property
    def prompt(self) -> Optional[str]:
        """``PROMPT_TASK`` or ``PROMPT_NOTE`` while a prompt is open."""
        return self._prompt

    @property
    def input_buffer(self) -> Optional[str]:
        """Text typed into the open prompt, ``None`` when no prompt is open."""
        return self._input_buffer

    def handle_key(self, key: str) -> CommandOutcome:
        if self._prompt == PROMPT_TASK:
            return self._handle_task_key(key)
        if self._prompt == PROMPT_NOTE:
            return self._handle_note_key(key)

        action = KEY_BINDINGS.get(key.lower() if key.isalpha() else key)
        if action is None:
            return CommandOutcome(None, False)
        return self.dispatch(action)

    def dispatch(self, action: str) -> CommandOutcome:
        handler = self._handlers.get(action)
        if handler is None:
            self._logger.warning("Unsupported action: %s", action)
            return CommandOutcome(action, False, f"Unknown action: {action}")
        try:
            return handler()
        except PomodoroError as error:
            self._logger.info("Action rejected: action=%s reason=%s", action, error)
            return CommandOutcome(action, False, str(error))

    def begin_session_note(self, session_id: str) -> CommandOutcome:
        """Open the note prompt for a just-recorded work session."""
        self._prompt = PROMPT_NOTE
        self._input_buffer = ""
        self._note_session_id = session_id
        return CommandOutcome(
            ACTION_SESSION_NOTE,
            True,
            "Session note (Enter to save, Esc to skip, space to start next):",
        )

    def _timer_outcome(self, result: TimerActionResult) -> CommandOutcome:
        return CommandOutcome(
            result.action,
            result.accepted,
            action_text(result.reason, result.snapshot),
            completed=result.completed,
        )

    def _toggle(self) -> CommandOutcome:
        return self._timer_outcome(self._state.engine.toggle())

    def _reset(self) -> CommandOutcome:
        return self._timer_outcome(self._state.engine.reset())

    def _skip(self) -> CommandOutcome:
        return self._timer_outcome(self._state.engine.skip())

    def _switch_mode(self) -> CommandOutcome:
        return self._timer_outcome(self._state.engine.switch_mode())

    def _adjust_duration(self, delta_seconds: int) -> CommandOutcome:
        snapshot = self._state.engine.snapshot()
        result = self._state.engine.set_custom_duration(snapshot.duration_seconds + delta_seconds)
        return self._timer_outcome(result)

    def _move_selection(self, step: int) -> CommandOutcome:
        count = len(self._state.tasks)
        if count == 0:
            return CommandOutcome(None, False)
        self._selected_index = (self._selected_index + step) % count
        task = self._state.tasks.tasks[self._selected_index]
        return CommandOutcome(None, True, f"Selected: {task.name}")

    def _close_prompt(self) -> None:
        self._prompt = None
        self._input_buffer = None
        self._note_session_id = None

    def _begin_task_input(self) -> CommandOutcome:
        self._prompt = PROMPT_TASK
        self._input_buffer = ""
        message = "New task (Enter to save, Tab completes #tags, Esc to cancel):"
        recent = self._state.tag_ledger.recent()
        if recent:
            message = f"{message} recent {' '.join('#' + tag for tag in recent)}"
        return CommandOutcome(ACTION_ADD_TASK, True, message)

    def _handle_task_key(self, key: str) -> CommandOutcome:
        buffer = self._input_buffer or ""
        if key == KEY_ESCAPE:
            self._close_prompt()
            return CommandOutcome(ACTION_ADD_TASK, False, "Cancelled")
        if key in (KEY_ENTER, "\r"):
            self._close_prompt()
            try:
                task = self._state.add_task(buffer)
            except PomodoroError as error:
                return CommandOutcome(ACTION_ADD_TASK, False, str(error))
            self._selected_index = len(self._state.tasks) - 1
            return CommandOutcome(ACTION_ADD_TASK, True, f"Added task: {task.name}")
        if key == KEY_TAB:
            self._input_buffer = self._complete_tag(buffer)
        elif key in (KEY_BACKSPACE, "\b"):
            self._input_buffer = buffer[:-1]
        elif key.isprintable():
            self._input_buffer = buffer + key
        return CommandOutcome(None, True, self._task_prompt_text())

    def _task_prompt_text(self) -> str:
        text = f"New task: {self._input_buffer}"
        partial = _partial_tag(self._input_buffer or "")
        if partial:
            suggestion = self._state.tag_ledger.suggest(partial)
            if suggestion is not None and suggestion != partial:
                text = f"{text}  [Tab: #{suggestion}]"
        return text

    def _complete_tag(self, buffer: str) -> str:
        partial = _partial_tag(buffer)
        if not partial:
            return buffer
        suggestion = self._state.tag_ledger.suggest(partial)
        if suggestion is None:
            return buffer
        return f"{buffer[: len(buffer) - len(partial)]}{suggestion} "

    def _handle_note_key(self, key: str) -> CommandOutcome:
        buffer = self._input_buffer or ""
        if key == KEY_ESCAPE:
            self._close_prompt()
            return CommandOutcome(ACTION_SESSION_NOTE, False, "Note skipped")
        if key in (KEY_ENTER, "\r"):
            session_id = self._note_session_id
            self._close_prompt()
            if not buffer.strip() or session_id is None:
                return CommandOutcome(ACTION_SESSION_NOTE, False, "Note skipped")
            try:
                session = self._state.recorder.annotate(session_id, buffer)
            except PomodoroError as error:
                return CommandOutcome(ACTION_SESSION_NOTE, False, str(error))
            return CommandOutcome(ACTION_SESSION_NOTE, True, f"Note saved: {session.note}")
        if key == " " and not buffer:
            # Space on an empty note starts the next phase.
            self._close_prompt()
            return self._timer_outcome(self._state.engine.start())
        if key in (KEY_BACKSPACE, "\b"):
            self._input_buffer = buffer[:-1]
        elif key.isprintable() and len(buffer) < MAX_NOTE_LENGTH:
            self._input_buffer = buffer + key
        return CommandOutcome(None, True, f"Note: {self._input_buffer}")

    def _selected_task_id(self) -> Optional[str]:
        tasks = self._state.tasks.tasks
        if not tasks:
            return None
        self._selected_index = min(self._selected_index, len(tasks) - 1)
        return tasks[self._selected_index].id

    def _delete_task(self) -> CommandOutcome:
        task_id = self._selected_task_id()
        if task_id is None:
            return CommandOutcome(ACTION_DELETE_TASK, False, "No tasks")
        task = self._state.tasks.delete(task_id)
        self._clamp_selection()
        return CommandOutcome(ACTION_DELETE_TASK, True, f"Deleted task: {task.name}")

    def _toggle_task(self) -> CommandOutcome:
        task_id = self._selected_task_id()
        if task_id is None:
            return CommandOutcome(ACTION_TOGGLE_TASK, False, "No tasks")
        task = self._state.tasks.toggle_complete(task_id)
        state = "done" if task.completed else "open"
        return CommandOutcome(ACTION_TOGGLE_TASK, True, f"{task.name}: {state}")

    def _clear_completed(self) -> CommandOutcome:
        removed = self._state.tasks.clear_completed()
        self._clamp_selection()
        return CommandOutcome(ACTION_CLEAR_COMPLETED, True, f"Cleared {removed} completed task(s)")

    def _focus_task(self) -> CommandOutcome:
        task_id = self._selected_task_id()
        if task_id is None:
            return CommandOutcome(ACTION_FOCUS_TASK, False, "No tasks")
        engine = self._state.engine
        if engine.task_id == task_id:
            engine.detach_task()
            return CommandOutcome(ACTION_FOCUS_TASK, True, "Timer no longer tracks a task")
        engine.associate_task(task_id)
        name = self._state.task_name(task_id)
        remaining = format_duration(engine.snapshot().remaining_seconds)
        return CommandOutcome(ACTION_FOCUS_TASK, True, f"Tracking {name} ({remaining} left)")

    def _clamp_selection(self) -> None:
        count = len(self._state.tasks)
        self._selected_index = 0 if count == 0 else min(self._selected_index, count - 1)
