"""Synthesis of the short completion chime."""

import numpy as np

DEFAULT_SAMPLE_RATE_HZ = 44100


def synthesize_chime(
    frequency_hz: float,
    *,
    volume: float = 0.3,
    duration_seconds: float = 0.35,
    sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
) -> np.ndarray:
    """Two-note sine chime (root, then a fifth above) with exponential decay."""
    samples = int(duration_seconds * sample_rate_hz)
    t = np.arange(samples, dtype=np.float32) / sample_rate_hz
    envelope = np.exp(-6.0 * t / duration_seconds).astype(np.float32)
    first = np.sin(2 * np.pi * frequency_hz * t) * envelope
    second = np.sin(2 * np.pi * frequency_hz * 1.5 * t) * envelope
    return (np.concatenate([first, second]) * volume).astype(np.float32)
