class AlertError(Exception):
    """Raised when a completion alert cannot be delivered."""
