"""Exception hierarchy shared by the timer core and its stores."""


class PomodoroError(Exception):
    """Base exception for timer, task, and persistence failures."""


class InvalidDuration(PomodoroError):
    """Raised when a duration or cycle length is out of range."""


class InvalidSetting(PomodoroError):
    """Raised when a non-duration preference value is rejected."""


class InvalidTaskName(PomodoroError):
    """Raised when a task name is empty after normalization."""


class NotFound(PomodoroError):
    """Raised when a task or session id does not exist."""

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind} not found: {item_id}")
        self.kind = kind
        self.item_id = item_id


class CorruptState(PomodoroError):
    """Raised when a persisted document cannot be decoded."""

    def __init__(self, entity: str, detail: str = ""):
        message = f"Corrupt {entity} state"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.entity = entity


class IoFailure(PomodoroError):
    """Raised when writing a persisted document fails."""

    def __init__(self, entity: str, detail: str = ""):
        message = f"Failed to write {entity}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.entity = entity
