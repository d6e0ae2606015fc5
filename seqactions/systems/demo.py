"""DemoScenario — a self-running population of agents with random plans.

Each agent gets a plan of countdowns and small instant actions. Every tick
the scenario randomly pauses, resumes, despawns and respawns agents, which
exercises every queue transition including the despawn teardown.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from seqactions.actions.closure import FnAction
from seqactions.actions.countdown import CountdownAction
from seqactions.core.enums import AddOrder, AgentStatus, Domain
from seqactions.systems.rng import DeterministicRNG

if TYPE_CHECKING:
    from seqactions.actions.base import Action
    from seqactions.config import SimulationConfig
    from seqactions.core.world_state import WorldState

logger = logging.getLogger(__name__)

_PLAN_KINDS = ("wait", "wait", "wait", "shout", "rest")


def _shout(agent: int, world: WorldState) -> bool:
    world.resources["shouts"] = world.resources.get("shouts", 0) + 1
    logger.debug("Tick %d: Agent #%d shouts", world.tick, agent)
    return True


def _rest(agent: int, world: WorldState) -> bool:
    # Queue edits from inside on_start must be deferred.
    world.deferred_actions(agent).start(False).order(AddOrder.FRONT).add(CountdownAction(2))
    return True


class DemoScenario:
    """Scenario system: call ``populate`` once, then run as a WorldLoop system."""

    __slots__ = ("_config", "_rng", "_spawned", "_despawned")

    def __init__(self, config: SimulationConfig, rng: DeterministicRNG | None = None) -> None:
        self._config = config
        self._rng = rng or DeterministicRNG(config.world_seed)
        self._spawned: int = 0
        self._despawned: int = 0

    @property
    def total_spawned(self) -> int:
        return self._spawned

    @property
    def total_despawned(self) -> int:
        return self._despawned

    def populate(self, world: WorldState) -> None:
        for _ in range(self._config.initial_agent_count):
            self.spawn(world)

    def spawn(self, world: WorldState) -> int:
        agent = world.spawn_agent("worker")
        self._spawned += 1
        world.actions(agent).add_many(self.make_plan(agent, world.tick))
        logger.debug("Tick %d: Spawned worker #%d", world.tick, agent)
        return agent

    def make_plan(self, agent: int, tick: int) -> list[Action]:
        cfg = self._config
        plan: list[Action] = []
        for i in range(cfg.plan_length):
            kind = self._rng.choice(Domain.PLAN, agent, tick, _PLAN_KINDS, salt=i)
            if kind == "wait":
                count = self._rng.next_int(
                    Domain.DURATION, agent, tick, cfg.countdown_min, cfg.countdown_max, salt=i,
                )
                plan.append(CountdownAction(count))
            elif kind == "shout":
                plan.append(FnAction(_shout, label="shout"))
            else:
                plan.append(FnAction(_rest, label="rest"))
        return plan

    def __call__(self, world: WorldState) -> None:
        cfg = self._config
        tick = world.tick

        for agent in sorted(world.agents):
            if not world.is_alive(agent):
                continue
            status = world.status(agent)
            slots = world.agents[agent]

            if status == AgentStatus.RUNNING:
                if self._rng.next_bool(Domain.DESPAWN, agent, tick, cfg.despawn_chance):
                    world.despawn(agent)
                    self._despawned += 1
                    logger.info("Tick %d: Worker #%d despawned mid-action", tick, agent)
                elif self._rng.next_bool(Domain.PAUSE, agent, tick, cfg.pause_chance):
                    world.actions(agent).pause()
            elif status == AgentStatus.PAUSED:
                if self._rng.next_bool(Domain.RESUME, agent, tick, 0.5):
                    world.actions(agent).execute()
            elif slots.queue:
                world.actions(agent).execute()
            else:
                world.actions(agent).add_many(self.make_plan(agent, tick))

        if cfg.respawn:
            alive = sum(1 for a in world.agents if world.is_alive(a))
            for _ in range(cfg.initial_agent_count - alive):
                self.spawn(world)
