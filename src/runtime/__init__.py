"""Runtime engine exports."""

from .commands import KEY_BINDINGS, CommandDispatcher, CommandOutcome
from .loop import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from .state import AppState, build_app_state
from .terminal import TerminalSession, TerminalView

__all__ = [
    "KEY_BINDINGS",
    "AppState",
    "CommandDispatcher",
    "CommandOutcome",
    "RuntimeBootstrap",
    "RuntimeEngine",
    "RuntimeHooks",
    "TerminalSession",
    "TerminalView",
    "build_app_state",
]
