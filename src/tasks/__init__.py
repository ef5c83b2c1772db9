"""Task store exports."""

from .models import Task, parse_task_input
from .store import TaskStore
from .tags import TagLedger, TagUsage

__all__ = ["TagLedger", "TagUsage", "Task", "TaskStore", "parse_task_input"]
