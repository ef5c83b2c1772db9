"""Raw terminal input and a single-line status display."""

from __future__ import annotations

import logging
import os
import select
import sys
import termios
import tty
from typing import Any, Optional, TextIO

STATUS_CLEAR = "\r\x1b[2K"


class TerminalSession:
    """Puts stdin into cbreak mode for the lifetime of the ``with`` block.

    Does nothing when stdin is not a TTY, so the runtime can be driven from
    pipes and tests.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._stream = stream or sys.stdin
        self._logger = logger or logging.getLogger("runtime")
        self._saved_attributes: Optional[list[Any]] = None

    @property
    def is_interactive(self) -> bool:
        try:
            return self._stream.isatty()
        except ValueError:
            return False

    @property
    def active(self) -> bool:
        return self._saved_attributes is not None

    def __enter__(self) -> "TerminalSession":
        if not self.is_interactive:
            self._logger.debug("stdin is not a TTY; terminal mode unchanged")
            return self
        fd = self._stream.fileno()
        self._saved_attributes = termios.tcgetattr(fd)
        tty.setcbreak(fd)
        self._logger.debug("Terminal switched to cbreak mode")
        return self

    def __exit__(self, exc_type, exc, traceback) -> None:
        self.restore()

    def restore(self) -> None:
        if self._saved_attributes is None:
            return
        try:
            termios.tcsetattr(
                self._stream.fileno(),
                termios.TCSADRAIN,
                self._saved_attributes,
            )
        except (termios.error, OSError) as error:
            self._logger.error("Failed to restore terminal: %s", error)
        finally:
            self._saved_attributes = None
        self._logger.debug("Terminal restored")

    def read_key(self, timeout_seconds: float) -> Optional[str]:
        """Wait up to ``timeout_seconds`` for one key; None on timeout or EOF."""
        try:
            readable, _, _ = select.select([self._stream], [], [], max(0.0, timeout_seconds))
        except (ValueError, OSError):
            return None
        if not readable:
            return None
        data = os.read(self._stream.fileno(), 1)
        if not data:
            return None
        return data.decode("utf-8", errors="ignore") or None


class TerminalView:
    """Presentation that redraws one status line and prints messages above it."""
    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream or sys.stdout
        self._status = ""

    def show_status(self, text: str) -> None:
        self._status = text
        self._write(f"{STATUS_CLEAR}{text}")

    def show_message(self, text: str, *, level: str = "info") -> None:
        prefix = {"warning": "! ", "notification": "* "}.get(level, "")
        self._write(f"{STATUS_CLEAR}{prefix}{text}\n{self._status}")

    def close(self) -> None:
        if self._status:
            self._write("\n")

    def _write(self, text: str) -> None:
        self._stream.write(text)
        self._stream.flush()
