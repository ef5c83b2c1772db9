"""Durable load/save of the persisted documents with coalesced writes."""

from __future__ import annotations

import json
import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Literal, Optional

from history.models import Session
from pomodoro.clock import MonotonicClock
from pomodoro.errors import CorruptState, IoFailure
from preferences import Preferences
from tasks.models import Task
from tasks.tags import TagUsage

from .codecs import (
    ENTITY_CONFIG,
    ENTITY_SESSIONS,
    ENTITY_TAGS,
    ENTITY_TASKS,
    preferences_from_document,
    sessions_from_document,
    tags_from_document,
    tasks_from_document,
)
from .paths import StoragePaths

Entity = Literal["config", "tasks", "sessions", "tags"]
ENTITIES: tuple[Entity, ...] = (ENTITY_CONFIG, ENTITY_TASKS, ENTITY_SESSIONS, ENTITY_TAGS)

DEFAULT_WRITE_INTERVAL_SECONDS = 1.0
DEFAULT_FAILURE_WARNING_THRESHOLD = 3

DocumentSource = Callable[[], dict[str, Any]]


@dataclass(frozen=True)
class LoadedState:
    """Startup state; ``corrupt`` names entities that fell back to defaults."""
    preferences: Preferences
    tasks: list[Task]
    sessions: list[Session]
    tags: list[TagUsage] = field(default_factory=list)
    corrupt: tuple[str, ...] = ()


class PersistenceGateway:
    """Owns the JSON documents and decides when each is written.

    Writes for an entity are coalesced: after a write, further dirty marks
    wait until ``write_interval_seconds`` has passed and are then written
    together by ``poll()``. Preferences bypass this through
    ``save_preferences()``. ``flush()`` writes everything pending at once.

    A corrupt document that could not be backed up is never overwritten;
    each write attempt retries the backup first.
    """

    def __init__(
        self,
        paths: StoragePaths,
        *,
        write_interval_seconds: float = DEFAULT_WRITE_INTERVAL_SECONDS,
        clock: Optional[MonotonicClock] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
        on_warning: Optional[Callable[[str], None]] = None,
        failure_warning_threshold: int = DEFAULT_FAILURE_WARNING_THRESHOLD,
    ):
        if write_interval_seconds < 0:
            raise ValueError("write_interval_seconds cannot be negative")
        if failure_warning_threshold < 1:
            raise ValueError("failure_warning_threshold must be at least 1")

        self._paths = paths
        self._write_interval = float(write_interval_seconds)
        self._clock = clock or MonotonicClock()
        self._now = now_fn or (lambda: datetime.now(timezone.utc))
        self._logger = logger or logging.getLogger("storage")
        self._on_warning = on_warning
        self._failure_warning_threshold = failure_warning_threshold

        self._sources: dict[str, DocumentSource] = {}
        self._dirty: set[str] = set()
        self._last_attempt: dict[str, float] = {}
        self._failures: dict[str, int] = {entity: 0 for entity in ENTITIES}
        self._unbacked_corrupt: set[str] = set()

    @property
    def paths(self) -> StoragePaths:
        return self._paths

    def attach(self, entity: Entity, source: DocumentSource) -> None:
        self._require_entity(entity)
        self._sources[entity] = source

    def is_dirty(self, entity: Entity) -> bool:
        return entity in self._dirty

    def failure_count(self, entity: Entity) -> int:
        return self._failures[entity]

    def load(self) -> LoadedState:
        """Load all entities, substituting defaults for corrupt documents."""
        corrupt: list[str] = []

        try:
            preferences = self.load_preferences()
        except CorruptState as error:
            self._recover(error, self._paths.config_file)
            corrupt.append(error.entity)
            preferences = Preferences()

        try:
            tasks = self.load_tasks()
        except CorruptState as error:
            self._recover(error, self._paths.tasks_file)
            corrupt.append(error.entity)
            tasks = []

        try:
            sessions = self.load_sessions()
        except CorruptState as error:
            self._recover(error, self._paths.sessions_file)
            corrupt.append(error.entity)
            sessions = []

        try:
            tags = self.load_tags()
        except CorruptState as error:
            self._recover(error, self._paths.tags_file)
            corrupt.append(error.entity)
            tags = []

        self._logger.info(
            "Loaded state: tasks=%d sessions=%d tags=%d corrupt=%s",
            len(tasks),
            len(sessions),
            len(tags),
            ",".join(corrupt) or "none",
        )
        return LoadedState(
            preferences=preferences,
            tasks=tasks,
            sessions=sessions,
            tags=tags,
            corrupt=tuple(corrupt),
        )

    def load_preferences(self) -> Preferences:
        raw = self._read_document(self._paths.config_file, ENTITY_CONFIG)
        if raw is None:
            return Preferences()
        return preferences_from_document(raw)

    def load_tasks(self) -> list[Task]:
        raw = self._read_document(self._paths.tasks_file, ENTITY_TASKS)
        if raw is None:
            return []
        return tasks_from_document(raw)

    def load_sessions(self) -> list[Session]:
        raw = self._read_document(self._paths.sessions_file, ENTITY_SESSIONS)
        if raw is None:
            return []
        return sessions_from_document(raw)

    def load_tags(self) -> list[TagUsage]:
        raw = self._read_document(self._paths.tags_file, ENTITY_TAGS)
        if raw is None:
            return []
        return tags_from_document(raw)

    def mark_dirty(self, entity: Entity) -> None:
        self._require_entity(entity)
        self._dirty.add(entity)

    def poll(self) -> list[str]:
        """Write dirty entities whose coalescing window has elapsed."""
        if not self._dirty:
            return []

        now = self._clock.now()
        written: list[str] = []
        for entity in ENTITIES:
            if entity not in self._dirty:
                continue
            last = self._last_attempt.get(entity)
            if last is not None and now - last < self._write_interval:
                continue
            if self._write(entity, now):
                written.append(entity)
        return written

    def save_preferences(self) -> bool:
        """Write preferences synchronously; failures stay dirty for retry."""
        self.mark_dirty(ENTITY_CONFIG)
        return self._write(ENTITY_CONFIG, self._clock.now())

    def flush(self) -> list[str]:
        """Write every pending entity now; returns the entities that failed.

        An interrupt during one write does not skip the others; it is
        re-raised once every entity has had its attempt.
        """
        now = self._clock.now()
        failed: list[str] = []
        interrupted: Optional[BaseException] = None
        for entity in ENTITIES:
            if entity not in self._dirty:
                continue
            try:
                if not self._write(entity, now):
                    failed.append(entity)
            except (KeyboardInterrupt, SystemExit) as error:
                self._logger.warning("Write of %s interrupted during flush", entity)
                failed.append(entity)
                interrupted = interrupted or error
        if failed:
            self._logger.error("Flush incomplete, unsaved: %s", ", ".join(failed))
        else:
            self._logger.debug("Flush complete")
        if interrupted is not None:
            raise interrupted
        return failed

    def _write(self, entity: str, now: float) -> bool:
        source = self._sources.get(entity)
        if source is None:
            self._logger.warning("No document source attached for %s; skipping write", entity)
            return False

        self._last_attempt[entity] = now
        if entity in self._unbacked_corrupt:
            path = self._path_for(entity)
            if path.exists() and self._backup_corrupt(path) is None:
                self._logger.warning("Not overwriting unbacked corrupt %s file", entity)
                return False
            self._unbacked_corrupt.discard(entity)
        try:
            self._write_document(self._path_for(entity), entity, source())
        except IoFailure as error:
            self._failures[entity] += 1
            self._logger.warning(
                "%s (attempt %d); will retry",
                error,
                self._failures[entity],
            )
            if self._failures[entity] == self._failure_warning_threshold:
                self._warn(f"Unable to save {entity}: {error}")
            return False

        self._dirty.discard(entity)
        self._failures[entity] = 0
        self._logger.debug("Saved %s", entity)
        return True

    def _write_document(self, path: Path, entity: str, document: dict[str, Any]) -> None:
        payload = json.dumps(document, indent=2, ensure_ascii=False)
        temp_path = path.with_name(f"{path.name}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.write("\n")
                fh.flush()
                os.fsync(fh.fileno())
            # Atomic rename so readers never see a half-written document.
            os.replace(temp_path, path)
        except OSError as error:
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError:
                    pass
            raise IoFailure(entity, str(error)) from error

    def _read_document(self, path: Path, entity: str) -> Optional[Any]:
        if not path.exists():
            return None
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise CorruptState(entity, f"unreadable file {path}: {error}") from error
        try:
            return json.loads(text)
        except json.JSONDecodeError as error:
            raise CorruptState(entity, f"invalid JSON in {path}: {error}") from error

    def _recover(self, error: CorruptState, path: Path) -> None:
        self._logger.error("%s; continuing with defaults", error)
        backup = self._backup_corrupt(path)
        if backup is not None:
            self._warn(f"{error}. A copy was saved to {backup}.")
        else:
            self._unbacked_corrupt.add(error.entity)
            self._warn(
                f"{error}. Using defaults; the file could not be backed up and "
                "will not be overwritten until a copy is made."
            )

    def _backup_corrupt(self, path: Path) -> Optional[Path]:
        stamp = self._now().strftime("%Y%m%dT%H%M%SZ")
        backup = path.with_name(f"{path.name}.corrupt-{stamp}")
        try:
            shutil.copy2(path, backup)
        except OSError as error:
            self._logger.error("Failed to back up corrupt file %s: %s", path, error)
            return None
        self._logger.warning("Corrupt file preserved at %s", backup)
        return backup

    def _path_for(self, entity: str) -> Path:
        if entity == ENTITY_CONFIG:
            return self._paths.config_file
        if entity == ENTITY_TASKS:
            return self._paths.tasks_file
        if entity == ENTITY_TAGS:
            return self._paths.tags_file
        return self._paths.sessions_file

    def _warn(self, message: str) -> None:
        if self._on_warning is not None:
            self._on_warning(message)

    @staticmethod
    def _require_entity(entity: str) -> None:
        if entity not in ENTITIES:
            raise ValueError(f"Unknown entity: {entity!r}")
