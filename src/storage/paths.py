"""Resolution of the on-disk locations of the persisted documents."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

APP_DIR_NAME = "pomodoro-tui"
CONFIG_FILE_NAME = "config.json"
TASKS_FILE_NAME = "tasks.json"
SESSIONS_FILE_NAME = "sessions.json"
TAGS_FILE_NAME = "tags.json"


@dataclass(frozen=True)
class StoragePaths:
    """Absolute paths of the config, tasks, sessions and tags documents."""
    config_file: Path
    tasks_file: Path
    sessions_file: Path
    tags_file: Path

    @classmethod
    def from_dirs(cls, config_dir: Path, data_dir: Path) -> "StoragePaths":
        return cls(
            config_file=Path(config_dir) / CONFIG_FILE_NAME,
            tasks_file=Path(data_dir) / TASKS_FILE_NAME,
            sessions_file=Path(data_dir) / SESSIONS_FILE_NAME,
            tags_file=Path(data_dir) / TAGS_FILE_NAME,
        )

    @classmethod
    def from_settings(
        cls,
        settings,
        *,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "StoragePaths":
        config_dir = settings.config_dir or str(default_config_dir(environ))
        data_dir = settings.data_dir or str(default_data_dir(environ))
        return cls.from_dirs(Path(config_dir), Path(data_dir))


def default_config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = environ if environ is not None else os.environ
    base = env.get("XDG_CONFIG_HOME", "").strip()
    root = Path(base).expanduser() if base else Path.home() / ".config"
    return root / APP_DIR_NAME


def default_data_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    env = environ if environ is not None else os.environ
    base = env.get("XDG_DATA_HOME", "").strip()
    root = Path(base).expanduser() if base else Path.home() / ".local" / "share"
    return root / APP_DIR_NAME
