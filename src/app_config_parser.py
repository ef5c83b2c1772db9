"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    AlertSettings,
    AppConfig,
    AppConfigurationError,
    LoggingSettings,
    RuntimeSettings,
    StorageSettings,
)

_MIN_TICK_INTERVAL_MS = 10
_MAX_TICK_INTERVAL_MS = 1000


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        storage=_parse_storage_settings(_section(raw, "storage"), base_dir=base_dir),
        runtime=_parse_runtime_settings(_section(raw, "runtime")),
        alerts=_parse_alert_settings(_section(raw, "alerts")),
        logging=_parse_logging_settings(_section(raw, "logging"), base_dir=base_dir),
        source_file=source_file,
    )


def _parse_storage_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> StorageSettings:
    interval = _as_float(
        section.get("write_interval_seconds", 1.0),
        "storage.write_interval_seconds",
    )
    if interval < 0:
        raise AppConfigurationError("storage.write_interval_seconds cannot be negative.")
    return StorageSettings(
        config_dir=_resolve_path(
            base_dir,
            _as_str(section.get("config_dir", ""), "storage.config_dir"),
        ),
        data_dir=_resolve_path(
            base_dir,
            _as_str(section.get("data_dir", ""), "storage.data_dir"),
        ),
        write_interval_seconds=interval,
    )


def _parse_runtime_settings(section: Mapping[str, Any]) -> RuntimeSettings:
    tick_interval_ms = _as_int(
        section.get("tick_interval_ms", 100),
        "runtime.tick_interval_ms",
    )
    if not _MIN_TICK_INTERVAL_MS <= tick_interval_ms <= _MAX_TICK_INTERVAL_MS:
        raise AppConfigurationError(
            "runtime.tick_interval_ms must be in "
            f"[{_MIN_TICK_INTERVAL_MS}, {_MAX_TICK_INTERVAL_MS}], got: {tick_interval_ms}"
        )
    return RuntimeSettings(tick_interval_ms=tick_interval_ms)


def _parse_alert_settings(section: Mapping[str, Any]) -> AlertSettings:
    volume = _as_float(section.get("chime_volume", 0.3), "alerts.chime_volume")
    if not 0.0 <= volume <= 1.0:
        raise AppConfigurationError("alerts.chime_volume must be in [0.0, 1.0].")
    frequency = _as_float(
        section.get("chime_frequency_hz", 880.0),
        "alerts.chime_frequency_hz",
    )
    if frequency <= 0:
        raise AppConfigurationError("alerts.chime_frequency_hz must be positive.")
    return AlertSettings(
        enabled=_as_bool(section.get("enabled", True), "alerts.enabled"),
        output_device=(
            _as_int(section.get("output_device"), "alerts.output_device")
            if "output_device" in section
            else None
        ),
        chime_volume=volume,
        chime_frequency_hz=frequency,
    )


def _parse_logging_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> LoggingSettings:
    level = _as_str(section.get("level", "INFO"), "logging.level").upper() or "INFO"
    if not isinstance(logging.getLevelName(level), int):
        raise AppConfigurationError(f"logging.level is not a known level: {level}")
    return LoggingSettings(
        level=level,
        file=_resolve_path(base_dir, _as_str(section.get("file", ""), "logging.file")),
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
