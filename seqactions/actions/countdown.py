"""CountdownAction — waits a number of ticks, pausable and resumable."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from seqactions.actions.base import Action
from seqactions.core.enums import StopReason

if TYPE_CHECKING:
    from seqactions.core.world_state import WorldState

logger = logging.getLogger(__name__)

COUNTDOWN = "countdown"


class CountdownAction(Action):
    """Finishes once the agent's countdown component reaches zero.

    The counter lives on the agent entity (``components["countdown"]``) and
    is decremented by ``countdown_system``. Pausing stores the remaining
    count so a resume continues where it left off.
    """

    __slots__ = ("count", "remaining")

    def __init__(self, count: int) -> None:
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        self.count = count
        self.remaining: int | None = None

    @property
    def name(self) -> str:
        return f"Countdown({self.count})"

    def on_start(self, agent: int, world: WorldState) -> bool:
        count = self.remaining if self.remaining is not None else self.count
        self.remaining = None
        world.entities[agent].components[COUNTDOWN] = count
        return self.is_finished(agent, world)

    def is_finished(self, agent: int, world: WorldState) -> bool:
        entity = world.entity(agent)
        if entity is None:
            return False
        return entity.components.get(COUNTDOWN, 0) <= 0

    def on_stop(self, agent: int | None, world: WorldState, reason: StopReason) -> None:
        if agent is None:
            return
        entity = world.entity(agent)
        if entity is None:
            return
        left = entity.components.pop(COUNTDOWN, None)
        if reason == StopReason.PAUSED and left is not None:
            self.remaining = left
            logger.debug("Agent #%d: countdown paused with %d ticks left", agent, left)


def countdown_system(world: WorldState) -> None:
    """Decrement every running countdown by one tick."""
    for entity in world.entities.values():
        left = entity.components.get(COUNTDOWN)
        if left is not None and left > 0:
            entity.components[COUNTDOWN] = left - 1
