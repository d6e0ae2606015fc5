"""Immutable snapshot of every agent's queue for readers on other threads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from seqactions.core.enums import AgentStatus

if TYPE_CHECKING:
    from seqactions.core.world_state import WorldState


@dataclass(frozen=True, slots=True)
class AgentView:
    """Read-only view of one agent's queue."""

    id: int
    kind: str
    alive: bool
    status: AgentStatus
    current: str | None
    pending: tuple[str, ...]
    deferred: int = 0


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Read-only view of the world, safe to share across threads."""

    tick: int
    agents: tuple[AgentView, ...]
    entity_count: int

    @classmethod
    def from_world(cls, world: WorldState) -> Snapshot:
        views = []
        for agent_id in sorted(world.agents):
            slots = world.agents[agent_id]
            entity = world.entity(agent_id)
            views.append(AgentView(
                id=agent_id,
                kind=entity.kind if entity is not None else "despawned",
                alive=entity is not None,
                status=slots.status,
                current=slots.current.action.name if slots.current.action is not None else None,
                pending=tuple(a.name for a in slots.queue),
                deferred=world.deferred.pending(agent_id),
            ))
        return cls(tick=world.tick, agents=tuple(views), entity_count=len(world.entities))

    def agent(self, agent_id: int) -> AgentView | None:
        for view in self.agents:
            if view.id == agent_id:
                return view
        return None

    @property
    def running_count(self) -> int:
        return sum(1 for v in self.agents if v.status == AgentStatus.RUNNING)
