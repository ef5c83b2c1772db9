"""Task records tracked alongside pomodoro sessions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

MAX_TASK_NAME_LENGTH = 120


@dataclass
class Task:
    """A user task; mutated only through ``TaskStore`` operations."""
    id: str
    name: str
    created_at: datetime
    completed: bool = False
    pomodoros_spent: int = 0
    tags: list[str] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        name: str,
        *,
        tags: Optional[list[str]] = None,
        created_at: Optional[datetime] = None,
    ) -> "Task":
        return cls(
            id=str(uuid.uuid4()),
            name=name,
            created_at=created_at or datetime.now(timezone.utc),
            tags=list(tags or []),
        )


def parse_task_input(raw: str) -> tuple[str, list[str]]:
    """Split ``"Write report #work #urgent"`` into a name and its tags."""
    name_parts: list[str] = []
    tags: list[str] = []
    for word in raw.split():
        if word.startswith("#") and len(word) > 1:
            tag = word[1:]
            if tag.lower() not in (existing.lower() for existing in tags):
                tags.append(tag)
        else:
            name_parts.append(word)
    return " ".join(name_parts)[:MAX_TASK_NAME_LENGTH], tags
