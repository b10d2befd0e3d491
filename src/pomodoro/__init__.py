from .service import (
    DEFAULT_CLOCK,
    BlockAction,
    BlockActionResult,
    BlockPhase,
    BlockSnapshot,
    BlockTimer,
    BlockTransition,
)

__all__ = [
    "DEFAULT_CLOCK",
    "BlockAction",
    "BlockActionResult",
    "BlockPhase",
    "BlockSnapshot",
    "BlockTimer",
    "BlockTransition",
]
