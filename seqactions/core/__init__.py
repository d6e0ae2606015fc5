"""Core data model: enums, queue components, world state, snapshots."""

from seqactions.core.components import ActionQueue, AddConfig, AgentActions, CurrentAction
from seqactions.core.enums import AddOrder, AgentStatus, DropReason, StopReason
from seqactions.core.errors import ActionsError, ReentrancyError
from seqactions.core.world_state import Entity, WorldState

__all__ = [
    "ActionQueue",
    "ActionsError",
    "AddConfig",
    "AddOrder",
    "AgentActions",
    "AgentStatus",
    "CurrentAction",
    "DropReason",
    "Entity",
    "ReentrancyError",
    "StopReason",
    "WorldState",
]
