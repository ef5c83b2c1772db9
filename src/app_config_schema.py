"""Dataclass schema objects used by application settings loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

DEFAULT_CONFIG_FILE = "config.toml"
CONFIG_FILE_ENV = "POMODORO_CONFIG_FILE"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class StorageSettings:
    """Data locations and write coalescing from `[storage]`."""
    config_dir: str = ""
    data_dir: str = ""
    write_interval_seconds: float = 1.0


@dataclass(frozen=True)
class RuntimeSettings:
    """Loop cadence from `[runtime]`."""
    tick_interval_ms: int = 100


@dataclass(frozen=True)
class AlertSettings:
    """Completion chime playback from `[alerts]`."""
    enabled: bool = True
    output_device: Optional[int] = None
    chime_volume: float = 0.3
    chime_frequency_hz: float = 880.0


@dataclass(frozen=True)
class LoggingSettings:
    """Log level and destination from `[logging]`."""
    level: str = "INFO"
    file: str = ""


@dataclass(frozen=True)
class AppConfig:
    """Complete typed application settings loaded from `config.toml`."""
    storage: StorageSettings = field(default_factory=StorageSettings)
    runtime: RuntimeSettings = field(default_factory=RuntimeSettings)
    alerts: AlertSettings = field(default_factory=AlertSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    source_file: str = ""
