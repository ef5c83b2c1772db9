"""Persistence gateway exports."""

from .codecs import (
    ENTITY_CONFIG,
    ENTITY_SESSIONS,
    ENTITY_TAGS,
    ENTITY_TASKS,
    preferences_to_document,
    sessions_to_document,
    tags_to_document,
    tasks_to_document,
)
from .gateway import ENTITIES, Entity, LoadedState, PersistenceGateway
from .paths import StoragePaths, default_config_dir, default_data_dir

__all__ = [
    "ENTITIES",
    "ENTITY_CONFIG",
    "ENTITY_SESSIONS",
    "ENTITY_TAGS",
    "ENTITY_TASKS",
    "Entity",
    "LoadedState",
    "PersistenceGateway",
    "StoragePaths",
    "default_config_dir",
    "default_data_dir",
    "preferences_to_document",
    "sessions_to_document",
    "tags_to_document",
    "tasks_to_document",
]
