"""Session history exports."""

from .models import (
    MAX_NOTE_LENGTH,
    RANGE_ALL_TIME,
    RANGE_THIS_WEEK,
    RANGE_TODAY,
    FocusSummary,
    HistogramDay,
    Session,
    Streak,
    SummaryRange,
)
from .recorder import SessionRecorder

__all__ = [
    "MAX_NOTE_LENGTH",
    "RANGE_ALL_TIME",
    "RANGE_THIS_WEEK",
    "RANGE_TODAY",
    "FocusSummary",
    "HistogramDay",
    "Session",
    "SessionRecorder",
    "Streak",
    "SummaryRange",
]
