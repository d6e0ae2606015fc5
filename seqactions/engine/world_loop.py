"""WorldLoop — the tick engine that drives systems and the QueueDriver.

Tick cycle:
  1. Advance — ``world.tick`` is incremented first, so work done during
     setup counts as tick 0 and is polled on tick 1
  2. Systems — host logic (timers, movement, scenario scripts) in order
  3. Queue — QueueDriver polls, advances, tears down and drains
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

from seqactions.core.snapshot import Snapshot
from seqactions.engine.driver import QueueDriver

if TYPE_CHECKING:
    from seqactions.config import SimulationConfig
    from seqactions.core.world_state import WorldState
    from seqactions.utils.event_log import SimEvent

logger = logging.getLogger(__name__)

System = Callable[["WorldState"], None]


class WorldLoop:
    """The heartbeat of the simulation.

    Single-threaded mutation of WorldState: systems first, then the queue
    driver, once per tick.
    """

    __slots__ = ("_config", "_world", "_systems", "_driver", "_tick_events")

    def __init__(
        self,
        config: SimulationConfig,
        world: WorldState,
        systems: tuple[System, ...] | list[System] = (),
        driver: QueueDriver | None = None,
    ) -> None:
        self._config = config
        self._world = world
        self._systems: list[System] = list(systems)
        self._driver = driver or QueueDriver()
        self._tick_events: list[SimEvent] = []

    @property
    def world(self) -> WorldState:
        return self._world

    @property
    def driver(self) -> QueueDriver:
        return self._driver

    @property
    def tick_events(self) -> list[SimEvent]:
        """Lifecycle events emitted during the most recent tick."""
        return self._tick_events

    def add_system(self, system: System) -> None:
        self._systems.append(system)

    def tick_once(self) -> bool:
        """Execute a single tick. Returns False if the simulation should stop."""
        if self._world.tick >= self._config.max_ticks:
            logger.info("Tick %d: Max ticks reached.", self._world.tick)
            return False
        self._step()
        return True

    def create_snapshot(self) -> Snapshot:
        """Create an immutable snapshot of the current queue state."""
        return Snapshot.from_world(self._world)

    def run(self) -> None:
        """Execute the simulation until max_ticks."""
        logger.info("=== Simulation started (seed=%d) ===", self._config.world_seed)

        while self.tick_once():
            if self._world.tick % 50 == 0:
                logger.info(
                    "Tick %d: %d agents, %d running",
                    self._world.tick,
                    len(self._world.agents),
                    sum(1 for s in self._world.agents.values() if s.current and not s.current.paused),
                )

        logger.info("=== Simulation finished at tick %d ===", self._world.tick)

    def _step(self) -> None:
        world = self._world
        world.tick_events = []
        world.tick += 1
        t0 = time.perf_counter()

        for system in self._systems:
            system(world)
        t1 = time.perf_counter()

        self._driver.step(world)
        t2 = time.perf_counter()

        self._tick_events = world.tick_events
        logger.debug(
            "Tick %d: systems=%.4fs queue=%.4fs events=%d",
            world.tick, t1 - t0, t2 - t1, len(self._tick_events),
        )
