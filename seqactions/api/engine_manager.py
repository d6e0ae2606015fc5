"""EngineManager — runs the WorldLoop on a background thread.

The API reads from an atomically-swapped immutable Snapshot. Queue edits
requested over HTTP are applied between ticks under the world lock, so they
always go through the immediate modify surface outside any callback.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import TYPE_CHECKING

from seqactions.actions.countdown import CountdownAction, countdown_system
from seqactions.core.enums import AddOrder
from seqactions.core.snapshot import Snapshot
from seqactions.core.world_state import WorldState
from seqactions.engine.world_loop import WorldLoop
from seqactions.systems.demo import DemoScenario
from seqactions.systems.rng import DeterministicRNG
from seqactions.utils.event_log import EventLog

if TYPE_CHECKING:
    from seqactions.config import SimulationConfig

logger = logging.getLogger(__name__)


class QueueOperation(str, Enum):
    """Queue edits exposed over HTTP, one per modify-surface call."""

    add = "add"
    execute = "execute"
    next = "next"
    done = "done"
    cancel = "cancel"
    pause = "pause"
    skip = "skip"
    clear = "clear"


class UnknownAgentError(LookupError):
    """The agent id does not own a queue (never spawned, or torn down)."""


class EngineManager:
    """Manages the simulation lifecycle on a background thread.

    Provides thread-safe access to:
      - latest snapshot (atomic reference swap)
      - event log (lock-guarded ring buffer)
      - control commands (start / pause / resume / step / reset)
      - queue edits on individual agents
    """

    def __init__(self, config: SimulationConfig) -> None:
        self._config = config
        self.config = config
        self._tick_rate: float = 0.1  # seconds between ticks

        self._world: WorldState | None = None
        self._loop: WorldLoop | None = None
        self._scenario: DemoScenario | None = None

        self._world_lock = threading.RLock()
        self._snapshot_lock = threading.Lock()
        self._latest_snapshot: Snapshot | None = None
        self._event_log = EventLog(maxlen=config.event_log_size)

        self._thread: threading.Thread | None = None
        self._running = threading.Event()
        self._paused = threading.Event()
        self._step_requested = threading.Event()
        self._stop_requested = threading.Event()

        self._build()

    # -- public properties --

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def paused(self) -> bool:
        return self._paused.is_set()

    @property
    def tick_rate(self) -> float:
        return self._tick_rate

    @tick_rate.setter
    def tick_rate(self, value: float) -> None:
        self._tick_rate = max(0.01, min(value, 2.0))

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def total_spawned(self) -> int:
        return self._scenario.total_spawned if self._scenario else 0

    @property
    def total_despawned(self) -> int:
        return self._scenario.total_despawned if self._scenario else 0

    # -- snapshot access --

    def get_snapshot(self) -> Snapshot | None:
        with self._snapshot_lock:
            return self._latest_snapshot

    def _publish(self) -> None:
        snap = self._loop.create_snapshot()
        with self._snapshot_lock:
            self._latest_snapshot = snap

    # -- lifecycle --

    def start(self) -> None:
        if self._running.is_set():
            return
        self._stop_requested.clear()
        self._paused.clear()
        self._running.set()
        self._thread = threading.Thread(target=self._run_loop, name="engine-loop", daemon=True)
        self._thread.start()
        logger.info("EngineManager started (tick_rate=%.3fs)", self._tick_rate)

    def pause(self) -> None:
        self._paused.set()
        logger.info("EngineManager paused at tick %d", self._current_tick())

    def resume(self) -> None:
        self._paused.clear()
        logger.info("EngineManager resumed at tick %d", self._current_tick())

    def step(self) -> None:
        """Execute exactly one tick (must be paused)."""
        if not self._paused.is_set():
            self.pause()
        if self._running.is_set():
            self._step_requested.set()
        else:
            self.tick()

    def stop(self) -> None:
        self._stop_requested.set()
        self._paused.clear()
        self._running.clear()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        self._thread = None
        logger.info("EngineManager stopped.")

    def reset(self) -> None:
        """Stop, rebuild, and leave stopped ready to start."""
        self.stop()
        self._event_log.clear()
        self._build()
        logger.info("EngineManager reset.")

    def tick(self) -> bool:
        """Run one tick synchronously on the calling thread."""
        with self._world_lock:
            advanced = self._loop.tick_once()
            events = list(self._loop.tick_events)
            self._publish()
        if events:
            self._event_log.append_many(events)
        return advanced

    # -- queue edits --

    def modify(
        self,
        agent: int,
        operation: QueueOperation | str,
        count: int = 1,
        front: bool = False,
        start: bool = True,
        repeat: bool = False,
    ) -> None:
        """Apply one queue operation to *agent* between ticks.

        ``add`` enqueues a CountdownAction of *count* ticks; ``skip`` drops
        *count* pending actions. Unknown operation names raise ValueError.
        """
        operation = QueueOperation(operation)
        with self._world_lock:
            world = self._world
            if agent not in world.agents or not world.is_alive(agent):
                raise UnknownAgentError(agent)
            proxy = world.actions(agent)
            if operation == QueueOperation.add:
                order = AddOrder.FRONT if front else AddOrder.BACK
                proxy.order(order).start(start).repeat(repeat).add(CountdownAction(count))
            elif operation == QueueOperation.skip:
                proxy.skip(count)
            else:
                getattr(proxy, operation.value)()
            events = world.tick_events
            world.tick_events = []
            self._publish()
        if events:
            self._event_log.append_many(events)

    def despawn(self, agent: int) -> None:
        with self._world_lock:
            if not self._world.despawn(agent):
                raise UnknownAgentError(agent)
            self._publish()

    # -- internals --

    def _build(self) -> None:
        """Construct all simulation components from config."""
        cfg = self._config
        world = WorldState(cfg)
        scenario = DemoScenario(cfg, DeterministicRNG(cfg.world_seed))
        scenario.populate(world)
        self._event_log.append_many(list(world.tick_events))
        world.tick_events = []
        self._world = world
        self._scenario = scenario
        self._loop = WorldLoop(cfg, world, systems=(countdown_system, scenario))
        self._publish()

    def _current_tick(self) -> int:
        snap = self.get_snapshot()
        return snap.tick if snap else 0

    def _run_loop(self) -> None:
        while not self._stop_requested.is_set():
            if self._paused.is_set():
                if self._step_requested.wait(timeout=0.05):
                    self._step_requested.clear()
                    self.tick()
                continue

            t0 = time.perf_counter()
            if not self.tick():
                logger.info("Simulation ended at tick %d", self._current_tick())
                self._running.clear()
                break
            elapsed = time.perf_counter() - t0
            remaining = self._tick_rate - elapsed
            if remaining > 0:
                time.sleep(remaining)
