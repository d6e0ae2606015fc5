"""Tests for WorldLoop ticking and the deterministic demo scenario.

The demo draws every random decision from the domain-separated xxhash RNG,
so two runs with the same seed and config produce identical snapshots at
every tick.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from seqactions.actions.countdown import countdown_system
from seqactions.config import SimulationConfig
from seqactions.core.enums import AgentStatus
from seqactions.core.snapshot import Snapshot
from seqactions.core.world_state import WorldState
from seqactions.engine.world_loop import WorldLoop
from seqactions.systems.demo import DemoScenario
from seqactions.systems.rng import DeterministicRNG
from tests.helpers.recorder import Recorder, make_world, run_ticks


def _demo(seed: int = 42, **overrides):
    defaults = dict(world_seed=seed, max_ticks=150, initial_agent_count=6,
                    pause_chance=0.1, despawn_chance=0.03)
    defaults.update(overrides)
    config = SimulationConfig(**defaults)
    world = WorldState(config)
    scenario = DemoScenario(config, DeterministicRNG(config.world_seed))
    scenario.populate(world)
    events = list(world.tick_events)
    loop = WorldLoop(config, world, systems=(countdown_system, scenario))
    return world, loop, scenario, events


class TestWorldLoop:

    def test_tick_increments_before_systems(self):
        world, loop = make_world()
        seen = []
        loop.add_system(lambda w: seen.append(w.tick))
        run_ticks(loop, 3)
        assert seen == [1, 2, 3]

    def test_stops_at_max_ticks(self):
        world, loop = make_world(max_ticks=3)
        assert loop.tick_once()
        assert loop.tick_once()
        assert loop.tick_once()
        assert not loop.tick_once()
        assert world.tick == 3

    def test_run_until_max_ticks(self):
        world, loop = make_world(max_ticks=20)
        loop.run()
        assert world.tick == 20
        assert loop.driver.steps == 20

    def test_tick_events_reset_each_tick(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        a = rec.action("A")
        world.actions(agent).add(a)
        a.finished = True

        run_ticks(loop, 1)
        assert {ev.category for ev in loop.tick_events} == {"stop", "remove", "drop"}
        run_ticks(loop, 1)
        assert loop.tick_events == []

    def test_snapshot_reflects_queue(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        world.actions(agent).add_many([rec.action("A"), rec.action("B")])
        world.deferred_actions(agent).next()

        snap = loop.create_snapshot()
        view = snap.agent(agent)
        assert view.status == AgentStatus.RUNNING
        assert view.current == "A"
        assert view.pending == ("B",)
        assert view.deferred == 1
        assert snap.running_count == 1
        assert snap.agent(999) is None


class TestDemoScenario:

    def test_populate_spawns_and_starts(self):
        world, _, scenario, events = _demo()
        assert scenario.total_spawned == 6
        assert len(world.agents) == 6
        assert world.tick == 0
        assert sum(1 for ev in events if ev.category == "add") >= 6 * world.config.plan_length

    def test_same_seed_same_run(self):
        w1, l1, _, _ = _demo(seed=7)
        w2, l2, _, _ = _demo(seed=7)
        for _ in range(150):
            l1.tick_once()
            l2.tick_once()
            assert Snapshot.from_world(w1) == Snapshot.from_world(w2)
        assert w1.resources == w2.resources

    def test_every_added_action_is_dropped_or_held(self):
        world, loop, _, events = _demo(seed=3, despawn_chance=0.05)
        while loop.tick_once():
            events.extend(loop.tick_events)

        adds = sum(1 for ev in events if ev.category == "add")
        drops = sum(1 for ev in events if ev.category == "drop")
        held = sum(len(s.queue) + (1 if s.current else 0) for s in world.agents.values())
        assert adds == drops + held

    def test_respawn_keeps_population(self):
        world, loop, scenario, _ = _demo(seed=11, despawn_chance=0.2)
        run_ticks(loop, 50)
        alive = [a for a in world.agents if world.is_alive(a)]
        assert len(alive) == 6
        assert scenario.total_despawned > 0
        assert scenario.total_spawned == 6 + scenario.total_despawned

    def test_no_respawn_population_shrinks(self):
        world, loop, scenario, _ = _demo(seed=11, despawn_chance=0.2, respawn=False)
        run_ticks(loop, 50)
        assert len(world.agents) == 6 - scenario.total_despawned
