"""Public exports for completion alert components.

``SoundDeviceChimeOutput`` lives in ``alerts.output`` and is imported on
demand, since ``sounddevice`` needs the PortAudio system library.
"""

from .chime import DEFAULT_SAMPLE_RATE_HZ, synthesize_chime
from .errors import AlertError
from .service import AlertService, ChimeOutputLike, Notification

__all__ = [
    "DEFAULT_SAMPLE_RATE_HZ",
    "AlertError",
    "AlertService",
    "ChimeOutputLike",
    "Notification",
    "synthesize_chime",
]
