"""Sequential action queues for agents in a tick-driven simulation."""

from seqactions.core import (
    AddConfig,
    AddOrder,
    AgentStatus,
    DropReason,
    ReentrancyError,
    StopReason,
    WorldState,
)
from seqactions.config import SimulationConfig
from seqactions.engine import QueueDriver, WorldLoop
from seqactions.actions import Action, CountdownAction, FnAction, countdown_system, into_action

__all__ = [
    "Action",
    "AddConfig",
    "AddOrder",
    "AgentStatus",
    "CountdownAction",
    "DropReason",
    "FnAction",
    "QueueDriver",
    "ReentrancyError",
    "SimulationConfig",
    "StopReason",
    "WorldLoop",
    "WorldState",
    "countdown_system",
    "into_action",
]

__version__ = "0.1.0"
