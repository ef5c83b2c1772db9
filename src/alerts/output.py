"""Sounddevice-backed playback of the completion chime."""

import logging
from typing import Optional

import numpy as np
import sounddevice as sd

from .errors import AlertError

class SoundDeviceChimeOutput:
    """Plays short mono PCM buffers through a selected sounddevice output."""
    def __init__(
        self,
        output_device_index: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._output_device_index = output_device_index
        self._logger = logger or logging.getLogger(__name__)

    def play(self, wav: np.ndarray, sample_rate_hz: int, blocking: bool = False) -> None:
        if wav.ndim != 1:
            raise AlertError("Expected mono PCM array for playback")
        if len(wav) == 0:
            raise AlertError("Cannot play empty audio buffer")

        self._logger.debug(
            "Playing %d chime samples at %d Hz (device=%s)",
            len(wav),
            sample_rate_hz,
            self._output_device_index,
        )
        try:
            # Non-blocking by default so the tick loop keeps its cadence.
            sd.play(wav, samplerate=sample_rate_hz, device=self._output_device_index)
            if blocking:
                sd.wait()
        except Exception as error:
            raise AlertError(f"Chime playback failed: {error}") from error
