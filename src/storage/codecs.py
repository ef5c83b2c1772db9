"""JSON document codecs for preferences, tasks, session history, and tags."""

from __future__ import annotations

import dataclasses
import re
from datetime import date, datetime, timezone
from typing import Any, Mapping, Optional

from history.models import Session
from pomodoro.constants import (
    PHASE_CUSTOM,
    PHASE_SHORT_BREAK,
    PHASE_WORK,
    POMODORO_PHASES,
    SESSION_TYPE_BREAK,
    SESSION_TYPE_WORK,
)
from pomodoro.errors import CorruptState, PomodoroError
from preferences import Preferences
from tasks.models import Task
from tasks.tags import TagUsage

ENTITY_CONFIG = "config"
ENTITY_TASKS = "tasks"
ENTITY_SESSIONS = "sessions"
ENTITY_TAGS = "tags"

_FRACTION_RE = re.compile(r"(\.\d{6})\d+")
_KNOWN_PHASES = POMODORO_PHASES | {PHASE_CUSTOM}


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(value: Any, field: str, entity: str) -> datetime:
    if not isinstance(value, str) or not value.strip():
        raise CorruptState(entity, f"{field} must be an ISO-8601 string")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # Other writers may emit nanosecond fractions; datetime keeps microseconds.
    text = _FRACTION_RE.sub(r"\1", text)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as error:
        raise CorruptState(entity, f"{field} is not ISO-8601: {value!r}") from error
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def preferences_to_document(preferences: Preferences) -> dict[str, Any]:
    return dataclasses.asdict(preferences)


def preferences_from_document(raw: Any) -> Preferences:
    if not isinstance(raw, Mapping):
        raise CorruptState(ENTITY_CONFIG, "root must be an object")

    defaults = Preferences()
    values: dict[str, Any] = {}
    for field in dataclasses.fields(Preferences):
        if field.name not in raw:
            continue
        value = raw[field.name]
        default = getattr(defaults, field.name)
        if isinstance(default, bool):
            values[field.name] = _as_bool(value, field.name, ENTITY_CONFIG)
        elif isinstance(default, int):
            values[field.name] = _as_int(value, field.name, ENTITY_CONFIG)
        else:
            values[field.name] = _as_str(value, field.name, ENTITY_CONFIG)

    try:
        return Preferences(**values)
    except PomodoroError as error:
        raise CorruptState(ENTITY_CONFIG, str(error)) from error


def tasks_to_document(tasks: list[Task]) -> dict[str, Any]:
    return {
        "tasks": [
            {
                "id": task.id,
                "name": task.name,
                "created_at": format_timestamp(task.created_at),
                "completed": task.completed,
                "pomodoros_spent": task.pomodoros_spent,
                "tags": list(task.tags),
            }
            for task in tasks
        ]
    }


def tasks_from_document(raw: Any) -> list[Task]:
    items = _collection(raw, ENTITY_TASKS)
    tasks: list[Task] = []
    for index, item in enumerate(items):
        prefix = f"tasks[{index}]"
        if not isinstance(item, Mapping):
            raise CorruptState(ENTITY_TASKS, f"{prefix} must be an object")
        tags = item.get("tags", [])
        if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
            raise CorruptState(ENTITY_TASKS, f"{prefix}.tags must be a list of strings")
        tasks.append(
            Task(
                id=_required_str(item, "id", prefix, ENTITY_TASKS),
                name=_as_str(item.get("name", ""), f"{prefix}.name", ENTITY_TASKS),
                created_at=parse_timestamp(
                    item.get("created_at"), f"{prefix}.created_at", ENTITY_TASKS
                ),
                completed=_as_bool(
                    item.get("completed", False), f"{prefix}.completed", ENTITY_TASKS
                ),
                pomodoros_spent=_as_int(
                    item.get("pomodoros_spent", 0),
                    f"{prefix}.pomodoros_spent",
                    ENTITY_TASKS,
                ),
                tags=list(tags),
            )
        )
    return tasks


def sessions_to_document(sessions: list[Session]) -> dict[str, Any]:
    documents = []
    for session in sessions:
        document: dict[str, Any] = {
            "id": session.id,
            "timestamp": format_timestamp(session.timestamp),
            "type": session.session_type,
            "phase": session.phase,
            "duration_secs": session.duration_seconds,
            "completed": session.completed,
            "task": session.task_id,
        }
        if session.note:
            document["note"] = session.note
        documents.append(document)
    return {"sessions": documents}


def sessions_from_document(raw: Any) -> list[Session]:
    items = _collection(raw, ENTITY_SESSIONS)
    sessions: list[Session] = []
    for index, item in enumerate(items):
        prefix = f"sessions[{index}]"
        if not isinstance(item, Mapping):
            raise CorruptState(ENTITY_SESSIONS, f"{prefix} must be an object")
        sessions.append(
            Session(
                id=_required_str(item, "id", prefix, ENTITY_SESSIONS),
                timestamp=parse_timestamp(
                    item.get("timestamp"), f"{prefix}.timestamp", ENTITY_SESSIONS
                ),
                phase=_session_phase(item, prefix),
                duration_seconds=_as_int(
                    item.get("duration_secs", 0),
                    f"{prefix}.duration_secs",
                    ENTITY_SESSIONS,
                ),
                completed=_as_bool(
                    item.get("completed", True), f"{prefix}.completed", ENTITY_SESSIONS
                ),
                task_id=_as_optional_str(item.get("task"), f"{prefix}.task"),
                note=_as_optional_str(item.get("note"), f"{prefix}.note"),
            )
        )
    return sessions


def tags_to_document(tags: list[TagUsage]) -> dict[str, Any]:
    return {
        "tags": [
            {
                "name": tag.name,
                "last_used": tag.last_used.isoformat(),
                "count": tag.count,
            }
            for tag in tags
        ]
    }


def tags_from_document(raw: Any) -> list[TagUsage]:
    items = _collection(raw, ENTITY_TAGS)
    tags: list[TagUsage] = []
    for index, item in enumerate(items):
        prefix = f"tags[{index}]"
        if not isinstance(item, Mapping):
            raise CorruptState(ENTITY_TAGS, f"{prefix} must be an object")
        last_used = _as_str(item.get("last_used"), f"{prefix}.last_used", ENTITY_TAGS)
        try:
            used_on = date.fromisoformat(last_used)
        except ValueError as error:
            raise CorruptState(
                ENTITY_TAGS, f"{prefix}.last_used is not a date: {last_used!r}"
            ) from error
        count = _as_int(item.get("count", 1), f"{prefix}.count", ENTITY_TAGS)
        if count < 1:
            raise CorruptState(ENTITY_TAGS, f"{prefix}.count must be >= 1")
        tags.append(
            TagUsage(
                name=_required_str(item, "name", prefix, ENTITY_TAGS),
                last_used=used_on,
                count=count,
            )
        )
    return tags


def _session_phase(item: Mapping[str, Any], prefix: str) -> str:
    phase = item.get("phase")
    if isinstance(phase, str) and phase in _KNOWN_PHASES:
        return phase

    session_type = _as_str(item.get("type", ""), f"{prefix}.type", ENTITY_SESSIONS)
    if session_type in _KNOWN_PHASES:
        return session_type
    if session_type == SESSION_TYPE_WORK:
        return PHASE_WORK
    if session_type == SESSION_TYPE_BREAK:
        return PHASE_SHORT_BREAK
    raise CorruptState(ENTITY_SESSIONS, f"{prefix}.type is unknown: {session_type!r}")


def _collection(raw: Any, entity: str) -> list[Any]:
    if not isinstance(raw, Mapping):
        raise CorruptState(entity, "root must be an object")
    items = raw.get(entity, [])
    if items is None:
        return []
    if not isinstance(items, list):
        raise CorruptState(entity, f"{entity} must be a list")
    return items


def _required_str(
    section: Mapping[str, Any],
    field: str,
    prefix: str,
    entity: str,
) -> str:
    text = _as_str(section.get(field), f"{prefix}.{field}", entity)
    if not text:
        raise CorruptState(entity, f"{prefix}.{field} is required")
    return text


def _as_str(value: Any, field: str, entity: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise CorruptState(entity, f"{field} must be a string")


def _as_optional_str(value: Any, field: str) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    raise CorruptState(ENTITY_SESSIONS, f"{field} must be a string or null")


def _as_bool(value: Any, field: str, entity: str) -> bool:
    if isinstance(value, bool):
        return value
    raise CorruptState(entity, f"{field} must be a boolean")


def _as_int(value: Any, field: str, entity: str) -> int:
    if isinstance(value, bool):
        raise CorruptState(entity, f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise CorruptState(entity, f"{field} must be an integer")
