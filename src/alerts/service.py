"""Dispatches notification and chime side effects for completed phases."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import numpy as np

from pomodoro import PhaseCompleted

from .chime import DEFAULT_SAMPLE_RATE_HZ, synthesize_chime
from .errors import AlertError
from .messages import completion_body, completion_title


class ChimeOutputLike(Protocol):
    def play(self, wav: np.ndarray, sample_rate_hz: int, blocking: bool = False) -> None:
        ...


class AlertPreferencesLike(Protocol):
    notifications_enabled: bool
    sound_enabled: bool


@dataclass(frozen=True)
class Notification:
    """User-facing completion message handed to the presentation layer."""
    title: str
    body: str


class AlertService:
    """Consumes completion events; never raises into the tick loop."""
    def __init__(
        self,
        *,
        output: Optional[ChimeOutputLike] = None,
        chime_frequency_hz: float = 880.0,
        chime_volume: float = 0.3,
        logger: Optional[logging.Logger] = None,
    ):
        self._output = output
        self._chime_frequency_hz = chime_frequency_hz
        self._chime_volume = chime_volume
        self._logger = logger or logging.getLogger("alerts")
        self._chime: Optional[np.ndarray] = None

    def handle(
        self,
        event: PhaseCompleted,
        preferences: AlertPreferencesLike,
        *,
        task_name: Optional[str] = None,
    ) -> Optional[Notification]:
        notification: Optional[Notification] = None
        if preferences.notifications_enabled:
            notification = Notification(
                title=completion_title(event.phase),
                body=completion_body(event.next_phase, task_name),
            )

        if preferences.sound_enabled:
            self._play_chime()
        return notification

    def _play_chime(self) -> None:
        if self._output is None:
            return
        if self._chime is None:
            self._chime = synthesize_chime(
                self._chime_frequency_hz,
                volume=self._chime_volume,
            )
        try:
            self._output.play(self._chime, DEFAULT_SAMPLE_RATE_HZ)
        except AlertError as error:
            self._logger.error("Completion chime failed: %s", error)
