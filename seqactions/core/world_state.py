"""Mutable shared world state — the store every action callback receives."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator

from seqactions.config import SimulationConfig
from seqactions.core.components import AgentActions
from seqactions.core.enums import AgentStatus
from seqactions.engine.deferred import DeferredActions
from seqactions.utils.event_log import SimEvent

if TYPE_CHECKING:
    from seqactions.engine.modify import AgentActionsProxy, DeferredActionsProxy

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Entity:
    """A spawned thing in the world. Components are free-form per entity."""

    id: int
    kind: str = "agent"
    components: dict[str, Any] = field(default_factory=dict)


class WorldState:
    """The single source of truth for the simulation.

    Entity liveness lives in ``entities``; action queues live in ``agents``.
    Despawning an entity does not touch its queue: the QueueDriver notices
    the dead agent on its next step and tears the queue down.
    """

    __slots__ = (
        "tick",
        "config",
        "entities",
        "resources",
        "agents",
        "deferred",
        "tick_events",
        "_callback_stack",
        "_draining",
        "_chain",
        "_next_entity_id",
    )

    def __init__(self, config: SimulationConfig | None = None) -> None:
        self.tick: int = 0
        self.config: SimulationConfig = config or SimulationConfig()
        self.entities: dict[int, Entity] = {}
        self.resources: dict[str, Any] = {}
        self.agents: dict[int, AgentActions] = {}
        self.deferred: DeferredActions = DeferredActions()
        self.tick_events: list[SimEvent] = []
        self._callback_stack: list[int] = []
        self._draining: set[int] = set()
        self._chain: dict[int, int] = {}  # agent -> starts in the running operation
        self._next_entity_id: int = 1

    # -- entities --

    def allocate_entity_id(self) -> int:
        eid = self._next_entity_id
        self._next_entity_id += 1
        return eid

    def spawn(self, kind: str = "entity") -> int:
        """Spawn a plain entity without an action queue."""
        eid = self.allocate_entity_id()
        self.entities[eid] = Entity(id=eid, kind=kind)
        return eid

    def spawn_agent(self, kind: str = "agent") -> int:
        """Spawn an entity that owns an (empty) action queue."""
        eid = self.spawn(kind)
        self.agents[eid] = AgentActions()
        return eid

    def despawn(self, entity_id: int) -> bool:
        """Remove *entity_id* from the world. Returns False if it was already gone."""
        entity = self.entities.pop(entity_id, None)
        if entity is None:
            return False
        logger.debug("Tick %d: Despawned %s #%d", self.tick, entity.kind, entity_id)
        return True

    def is_alive(self, entity_id: int) -> bool:
        return entity_id in self.entities

    def entity(self, entity_id: int) -> Entity | None:
        return self.entities.get(entity_id)

    # -- action queues --

    def has_actions(self, agent: int) -> bool:
        return agent in self.agents

    def status(self, agent: int) -> AgentStatus | None:
        """Queue status of *agent*, or None if it has no queue."""
        slots = self.agents.get(agent)
        return slots.status if slots is not None else None

    def actions(self, agent: int) -> AgentActionsProxy:
        """Immediate modify surface. Not for use inside the agent's own callbacks."""
        from seqactions.engine.modify import AgentActionsProxy
        return AgentActionsProxy(self, agent)

    def deferred_actions(self, agent: int) -> DeferredActionsProxy:
        """Deferred modify surface, safe from inside action callbacks."""
        from seqactions.engine.modify import DeferredActionsProxy
        return DeferredActionsProxy(self, agent)

    # -- callback bookkeeping --

    @contextmanager
    def callback_scope(self, agent: int) -> Iterator[None]:
        """Mark a lifecycle callback for *agent* as running."""
        self._callback_stack.append(agent)
        try:
            yield
        finally:
            self._callback_stack.pop()

    def in_callback(self, agent: int) -> bool:
        return agent in self._callback_stack

    @property
    def callback_depth(self) -> int:
        return len(self._callback_stack)

    @contextmanager
    def draining_scope(self, agent: int) -> Iterator[None]:
        """Mark *agent*'s deferred buffer as being drained."""
        self._draining.add(agent)
        try:
            yield
        finally:
            self._draining.discard(agent)

    def is_draining(self, agent: int) -> bool:
        return agent in self._draining

    @contextmanager
    def operation_scope(self, agent: int) -> Iterator[None]:
        """Count action starts for *agent* until the outermost scope exits.

        Nested scopes share the count, so starts caused by deferred commands
        land in the same budget as the operation that triggered them.
        """
        outermost = agent not in self._chain
        if outermost:
            self._chain[agent] = 0
        try:
            yield
        finally:
            if outermost:
                self._chain.pop(agent, None)

    def count_start(self, agent: int) -> None:
        if agent in self._chain:
            self._chain[agent] += 1

    def chain_length(self, agent: int) -> int:
        return self._chain.get(agent, 0)

    # -- events --

    def emit(self, category: str, message: str, entity_ids: tuple[int, ...] = ()) -> None:
        self.tick_events.append(SimEvent(
            tick=self.tick,
            category=category,
            message=message,
            entity_ids=entity_ids,
        ))
