"""Mutable task collection with completion and pomodoro tracking."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable, Iterator, Optional

from pomodoro.errors import InvalidTaskName, NotFound

from .models import MAX_TASK_NAME_LENGTH, Task, parse_task_input

DeleteListener = Callable[[str], None]


class TaskStore:
    """Ordered task list; every mutation notifies the change callback."""

    def __init__(
        self,
        tasks: Iterable[Task] = (),
        *,
        on_change: Optional[Callable[[], None]] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._tasks: list[Task] = list(tasks)
        self._on_change = on_change
        self._now = now_fn
        self._logger = logger or logging.getLogger("tasks")
        self._delete_listeners: list[DeleteListener] = []

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(tuple(self._tasks))

    def __contains__(self, task_id: object) -> bool:
        return any(task.id == task_id for task in self._tasks)

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    def bind(self, on_change: Callable[[], None]) -> None:
        self._on_change = on_change

    def add_delete_listener(self, listener: DeleteListener) -> None:
        self._delete_listeners.append(listener)

    def get(self, task_id: str) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def add(self, raw_name: str) -> Task:
        name, tags = parse_task_input(raw_name)
        if not name:
            raise InvalidTaskName("Task name cannot be empty")
        created_at = self._now() if self._now is not None else None
        task = Task.create(name, tags=tags, created_at=created_at)
        self._tasks.append(task)
        self._logger.info("Task added: id=%s name=%s", task.id, task.name)
        self._changed()
        return task

    def edit(self, task_id: str, name: str) -> Task:
        task = self._require(task_id)
        compact = " ".join(name.split())[:MAX_TASK_NAME_LENGTH]
        if not compact:
            raise InvalidTaskName("Task name cannot be empty")
        task.name = compact
        self._logger.info("Task renamed: id=%s name=%s", task.id, task.name)
        self._changed()
        return task

    def delete(self, task_id: str) -> Task:
        task = self._require(task_id)
        self._tasks.remove(task)
        self._logger.info("Task deleted: id=%s", task_id)
        for listener in self._delete_listeners:
            listener(task_id)
        self._changed()
        return task

    def toggle_complete(self, task_id: str) -> Task:
        task = self._require(task_id)
        task.completed = not task.completed
        self._changed()
        return task

    def clear_completed(self) -> int:
        completed_ids = [task.id for task in self._tasks if task.completed]
        if not completed_ids:
            return 0
        self._tasks = [task for task in self._tasks if not task.completed]
        for task_id in completed_ids:
            for listener in self._delete_listeners:
                listener(task_id)
        self._logger.info("Cleared %d completed task(s)", len(completed_ids))
        self._changed()
        return len(completed_ids)

    def credit_pomodoro(self, task_id: str) -> Optional[Task]:
        """Count a finished work session; returns None if the task is gone."""
        task = self.get(task_id)
        if task is None:
            self._logger.warning("Cannot credit pomodoro, task missing: id=%s", task_id)
            return None
        task.pomodoros_spent += 1
        self._changed()
        return task

    def clear(self) -> None:
        removed = [task.id for task in self._tasks]
        self._tasks.clear()
        for task_id in removed:
            for listener in self._delete_listeners:
                listener(task_id)
        self._changed()

    def _require(self, task_id: str) -> Task:
        task = self.get(task_id)
        if task is None:
            raise NotFound("task", task_id)
        return task

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()
