"""Runtime engine exports."""

from .command_dispatch import CommandDispatcher, CommandResult
from .loop import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from .session import BlockSession, StatusFrame
from .ticks import TickDependencies, TickLoop

__all__ = [
    "BlockSession",
    "CommandDispatcher",
    "CommandResult",
    "RuntimeBootstrap",
    "RuntimeEngine",
    "RuntimeHooks",
    "StatusFrame",
    "TickDependencies",
    "TickLoop",
]
