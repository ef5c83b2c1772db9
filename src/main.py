import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from alerts import AlertService, ChimeOutputLike
from app_config import (
    AlertSettings,
    AppConfigurationError,
    LoggingSettings,
    load_app_config,
)
from runtime import (
    RuntimeBootstrap,
    RuntimeEngine,
    RuntimeHooks,
    TerminalSession,
    TerminalView,
    build_app_state,
)
from storage import PersistenceGateway, StoragePaths

DEFAULT_LOG_FILE_NAME = "pomodoro.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    settings: Optional[LoggingSettings] = None,
    *,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Configure logging for the application.

    Logs go to a file while the terminal shows the status line; without a
    file they go to stderr.
    """
    settings = settings or LoggingSettings()
    level = logging.getLevelName(settings.level.upper())
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logging.basicConfig(
            level=level,
            format=LOG_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            filename=str(log_file),
            encoding="utf-8",
        )
    else:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    return logging.getLogger("pomodoro_app")


def setup_signal_handlers() -> None:
    """Turn SIGTERM, SIGINT and SIGHUP into SystemExit inside the loop."""

    def signal_handler(signum: int, frame) -> None:
        signal_name = signal.Signals(signum).name
        logging.getLogger("pomodoro_app").info("%s received, stopping...", signal_name)
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)
    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, signal_handler)


def ignore_signal_handlers() -> None:
    signal.signal(signal.SIGTERM, signal.SIG_IGN)
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, signal.SIG_IGN)


def build_chime_output(
    settings: AlertSettings,
    logger: logging.Logger,
) -> Optional[ChimeOutputLike]:
    if not settings.enabled:
        return None
    try:
        # sounddevice raises OSError at import time when PortAudio is missing.
        from alerts.output import SoundDeviceChimeOutput
    except (ImportError, OSError) as error:
        logger.warning("Completion chime disabled, audio output unavailable: %s", error)
        return None
    return SoundDeviceChimeOutput(
        output_device_index=settings.output_device,
        logger=logging.getLogger("alerts.output"),
    )


def main() -> int:
    """Run the terminal pomodoro timer."""
    try:
        app_config = load_app_config()
    except AppConfigurationError as error:
        logger = setup_logging()
        logger.error("App configuration error: %s", error)
        return 1

    paths = StoragePaths.from_settings(app_config.storage)
    log_file = (
        Path(app_config.logging.file)
        if app_config.logging.file
        else paths.sessions_file.parent / DEFAULT_LOG_FILE_NAME
    )
    logger = setup_logging(app_config.logging, log_file=log_file)
    if app_config.source_file:
        logger.info("Loaded runtime config: %s", app_config.source_file)

    view = TerminalView()
    gateway = PersistenceGateway(
        paths,
        write_interval_seconds=app_config.storage.write_interval_seconds,
        logger=logging.getLogger("storage"),
        on_warning=lambda message: view.show_message(message, level="warning"),
    )
    alerts = AlertService(
        output=build_chime_output(app_config.alerts, logger),
        chime_frequency_hz=app_config.alerts.chime_frequency_hz,
        chime_volume=app_config.alerts.chime_volume,
        logger=logging.getLogger("alerts"),
    )
    state = build_app_state(gateway, alerts=alerts, logger=logging.getLogger("runtime"))

    runtime = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            state=state,
            terminal=TerminalSession(logger=logging.getLogger("runtime.terminal")),
            presentation=view,
            hooks=RuntimeHooks(
                setup_signal_handlers=setup_signal_handlers,
                ignore_signals=ignore_signal_handlers,
            ),
        )
    )
    return runtime.run()


if __name__ == "__main__":
    sys.exit(main())
