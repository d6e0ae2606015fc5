"""Engine layer: deferred commands, queue driver, modify surfaces, world loop."""

from seqactions.engine.deferred import DeferredActions, DeferredCommand, DeferredOp
from seqactions.engine.driver import QueueDriver
from seqactions.engine.modify import AgentActionsProxy, DeferredActionsProxy
from seqactions.engine.world_loop import WorldLoop

__all__ = [
    "AgentActionsProxy",
    "DeferredActions",
    "DeferredActionsProxy",
    "DeferredCommand",
    "DeferredOp",
    "QueueDriver",
    "WorldLoop",
]
