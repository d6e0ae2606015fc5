"""Tests for despawn teardown.

A despawned agent's queue is torn down on the driver's next step (or right
away through ``QueueDriver.despawn``). Every callback receives agent=None.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from seqactions.core.enums import DropReason, StopReason
from seqactions.engine.driver import teardown_despawned
from tests.helpers.recorder import Call, Recorder, make_world, run_ticks


class TestDespawnTeardown:

    def test_running_and_pending_torn_down(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        world.actions(agent).add_many([rec.action("A"), rec.action("B")])
        rec.clear()

        world.despawn(agent)
        run_ticks(loop, 1)

        assert rec.events() == [
            "A.stop:CANCELED", "A.remove", "A.drop:DESPAWNED",
            "B.remove", "B.drop:DESPAWNED",
        ]
        assert all(c.agent is None for c in rec.calls)
        assert agent not in world.agents

    def test_pending_never_started(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        world.actions(agent).add_many([rec.action("A"), rec.action("B"), rec.action("C")])

        world.despawn(agent)
        run_ticks(loop, 2)

        assert rec.count("B", "start") == 0
        assert rec.count("C", "start") == 0
        assert rec.count("C", "drop") == 1

    def test_not_polled_after_despawn(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        a = rec.action("A")
        world.actions(agent).add(a)

        world.despawn(agent)
        run_ticks(loop, 1)
        assert a.polls == 0

    def test_paused_action_gets_no_second_stop(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        world.actions(agent).add(rec.action("A"))
        world.actions(agent).pause()
        rec.clear()

        world.despawn(agent)
        run_ticks(loop, 1)

        assert rec.events() == ["A.remove", "A.drop:DESPAWNED"]

    def test_idle_agent_with_queue(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        world.actions(agent).start(False).add(rec.action("A"))

        world.despawn(agent)
        run_ticks(loop, 1)

        assert rec.events() == ["A.add", "A.remove", "A.drop:DESPAWNED"]

    def test_teardown_is_idempotent(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        world.actions(agent).add(rec.action("A"))

        world.despawn(agent)
        teardown_despawned(world, agent)
        teardown_despawned(world, agent)
        run_ticks(loop, 3)

        assert rec.count("A", "drop") == 1

    def test_driver_despawn_is_immediate(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        world.actions(agent).add(rec.action("A"))

        loop.driver.despawn(world, agent)

        assert not world.is_alive(agent)
        assert agent not in world.agents
        assert rec.calls[-1].reason == DropReason.DESPAWNED

    def test_despawn_emits_event(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        world.actions(agent).add(rec.action("A"))

        world.despawn(agent)
        run_ticks(loop, 1)

        assert any(ev.category == "despawn" and agent in ev.entity_ids for ev in loop.tick_events)


class TestDespawnDuringCallbacks:

    def test_despawn_inside_on_start(self):
        rec = Recorder()
        world, _ = make_world()
        agent = world.spawn_agent()

        def on_start(ag, w):
            w.despawn(ag)

        world.actions(agent).add_many([rec.action("A", on_start=on_start), rec.action("B")])

        starts = [c for c in rec.calls if c.event == "start"]
        assert starts == [Call("A", "start", agent)]
        stop = [c for c in rec.calls if c.event == "stop"]
        assert [(c.label, c.agent, c.reason) for c in stop] == [("A", None, StopReason.CANCELED)]
        assert rec.count("B", "start") == 0
        assert rec.calls[-1].reason == DropReason.DESPAWNED
        assert agent not in world.agents

    def test_driver_despawn_inside_on_start(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()

        def on_start(ag, w):
            loop.driver.despawn(w, ag)

        world.actions(agent).add_many([rec.action("A", on_start=on_start), rec.action("B")])

        assert rec.events() == [
            "A.add", "B.add", "A.start",
            "A.stop:CANCELED", "A.remove", "A.drop:DESPAWNED",
            "B.remove", "B.drop:DESPAWNED",
        ]
        assert rec.agents("A")[-3:] == [None, None, None]
        assert rec.count("A", "drop") == 1
        assert agent not in world.agents

    def test_driver_despawn_inside_is_finished(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        a = rec.action("A")
        world.actions(agent).add_many([a, rec.action("B")])

        def poll(ag, w):
            loop.driver.despawn(w, ag)
            return False

        a.is_finished = poll
        run_ticks(loop, 1)

        assert rec.events("A")[-3:] == ["A.stop:CANCELED", "A.remove", "A.drop:DESPAWNED"]
        assert rec.events("B") == ["B.add", "B.remove", "B.drop:DESPAWNED"]
        assert agent not in world.agents

    def test_despawn_inside_instant_start_stops_chain(self):
        rec = Recorder()
        world, _ = make_world()
        agent = world.spawn_agent()

        def on_start(ag, w):
            w.despawn(ag)

        world.actions(agent).add_many([
            rec.action("A", instant=True, on_start=on_start),
            rec.action("B", instant=True),
        ])

        assert rec.count("B", "start") == 0
        assert rec.events("A")[-1] == "A.drop:DESPAWNED"

    def test_deferred_commands_dropped_on_despawn(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        world.actions(agent).add(rec.action("A"))
        world.deferred_actions(agent).add(rec.action("late"))

        world.despawn(agent)
        run_ticks(loop, 1)

        assert rec.events("late") == []
        assert world.deferred.pending(agent) == 0

    def test_despawn_by_another_agents_action(self):
        rec = Recorder()
        world, loop = make_world()
        victim = world.spawn_agent()
        world.actions(victim).add(rec.action("V"))
        killer = world.spawn_agent()

        def on_start(ag, w):
            w.despawn(victim)

        world.actions(killer).add(rec.action("K", on_start=on_start))
        assert rec.count("V", "drop") == 0

        run_ticks(loop, 1)
        assert rec.events("V")[-3:] == ["V.stop:CANCELED", "V.remove", "V.drop:DESPAWNED"]
        assert rec.agents("V")[-1] is None

    def test_despawn_inside_is_finished(self):
        rec = Recorder()
        world, loop = make_world()
        agent = world.spawn_agent()
        a = rec.action("A")
        world.actions(agent).add_many([a, rec.action("B")])

        def poll(ag, w):
            w.despawn(ag)
            return True

        a.is_finished = poll
        run_ticks(loop, 1)

        assert rec.events("A")[-3:] == ["A.stop:CANCELED", "A.remove", "A.drop:DESPAWNED"]
        assert rec.count("B", "start") == 0
