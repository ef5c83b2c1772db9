"""User preference model exports."""

from .model import Preferences

__all__ = ["Preferences"]
