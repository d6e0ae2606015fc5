"""Enumerations used throughout the action queue."""

from __future__ import annotations

from enum import IntEnum, unique


@unique
class AddOrder(IntEnum):
    """Where newly added actions are inserted in the queue."""

    BACK = 0
    FRONT = 1


@unique
class StopReason(IntEnum):
    """Why an action left the current slot."""

    FINISHED = 0
    CANCELED = 1
    PAUSED = 2


@unique
class DropReason(IntEnum):
    """Why an action was permanently destroyed."""

    DONE = 0
    CLEARED = 1
    DESPAWNED = 2


@unique
class AgentStatus(IntEnum):
    """Observable state of an agent's queue."""

    IDLE = 0
    RUNNING = 1
    PAUSED = 2


@unique
class Domain(IntEnum):
    """RNG domains for deterministic randomness isolation."""

    PLAN = 0
    DURATION = 1
    PAUSE = 2
    RESUME = 3
    DESPAWN = 4
    RESPAWN = 5
