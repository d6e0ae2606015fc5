"""Tests for the EngineManager and the REST API.

The app is built with autostart=False so every tick is driven explicitly
through /control/step and runs on the request thread.
"""

import sys
import os

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from seqactions.api.app import create_app
from seqactions.api.engine_manager import EngineManager, QueueOperation, UnknownAgentError
from seqactions.config import SimulationConfig
from seqactions.utils.event_log import EventLog, SimEvent


def _config(**overrides) -> SimulationConfig:
    defaults = dict(max_ticks=500, initial_agent_count=3, pause_chance=0.0, despawn_chance=0.0)
    defaults.update(overrides)
    return SimulationConfig(**defaults)


@pytest.fixture
def client():
    with TestClient(create_app(_config(), autostart=False)) as c:
        yield c


def _first_agent(client) -> int:
    return client.get("/api/v1/state").json()["agents"][0]["id"]


class TestEngineManager:

    def test_step_when_stopped_ticks_synchronously(self):
        mgr = EngineManager(_config())
        assert mgr.get_snapshot().tick == 0
        mgr.step()
        mgr.step()
        assert mgr.get_snapshot().tick == 2
        assert mgr.paused

    def test_reset_rebuilds_world(self):
        mgr = EngineManager(_config())
        for _ in range(5):
            mgr.step()
        mgr.reset()
        assert mgr.get_snapshot().tick == 0
        assert mgr.total_spawned == 3

    def test_same_seed_same_snapshots(self):
        m1 = EngineManager(_config(world_seed=5, pause_chance=0.1, despawn_chance=0.05))
        m2 = EngineManager(_config(world_seed=5, pause_chance=0.1, despawn_chance=0.05))
        for _ in range(60):
            m1.tick()
            m2.tick()
        assert m1.get_snapshot() == m2.get_snapshot()

    def test_modify_unknown_operation(self):
        mgr = EngineManager(_config())
        agent = mgr.get_snapshot().agents[0].id
        with pytest.raises(ValueError):
            mgr.modify(agent, "explode")

    def test_modify_unknown_agent(self):
        mgr = EngineManager(_config())
        with pytest.raises(UnknownAgentError):
            mgr.modify(999, "next")

    def test_modify_records_events(self):
        mgr = EngineManager(_config())
        agent = mgr.get_snapshot().agents[0].id
        before = len(mgr.event_log.for_entity(agent))
        mgr.modify(agent, "add", count=3, start=False)
        after = mgr.event_log.for_entity(agent)
        assert len(after) == before + 1
        assert after[-1].category == "add"

    def test_modify_accepts_queue_operation(self):
        mgr = EngineManager(_config())
        agent = mgr.get_snapshot().agents[0].id
        mgr.modify(agent, QueueOperation.clear)
        view = mgr.get_snapshot().agent(agent)
        assert view.current is None
        assert view.pending == ()

    def test_every_queue_operation_is_accepted(self):
        mgr = EngineManager(_config())
        agent = mgr.get_snapshot().agents[0].id
        for operation in QueueOperation:
            mgr.modify(agent, operation.value)
        assert mgr.get_snapshot().agent(agent).current is None

    def test_tick_rate_clamped(self):
        mgr = EngineManager(_config())
        mgr.tick_rate = 100.0
        assert mgr.tick_rate == 2.0
        mgr.tick_rate = 0.0
        assert mgr.tick_rate == 0.01


class TestStateRoutes:

    def test_state_lists_agents(self, client):
        body = client.get("/api/v1/state").json()
        assert body["tick"] == 0
        assert body["agent_count"] == 3
        assert {a["status"] for a in body["agents"]} <= {"idle", "running", "paused"}
        assert any(ev["category"] == "add" for ev in body["events"])

    def test_get_agent(self, client):
        agent = _first_agent(client)
        body = client.get(f"/api/v1/agents/{agent}").json()
        assert body["id"] == agent
        assert body["kind"] == "worker"

    def test_get_unknown_agent(self, client):
        assert client.get("/api/v1/agents/999").status_code == 404

    def test_stats(self, client):
        body = client.get("/api/v1/stats").json()
        assert body["agent_count"] == 3
        assert body["running"] is False

    def test_config(self, client):
        body = client.get("/api/v1/config").json()
        assert body["strict_reentrancy"] is True
        assert body["default_order"] == "back"


class TestControlRoutes:

    def test_step_advances_tick(self, client):
        body = client.post("/api/v1/control/step").json()
        assert body["status"] == "ok"
        assert body["tick"] == 1

    def test_pause_when_stopped(self, client):
        body = client.post("/api/v1/control/pause").json()
        assert body["status"] == "error"

    def test_reset(self, client):
        client.post("/api/v1/control/step")
        body = client.post("/api/v1/control/reset").json()
        assert body["tick"] == 0

    def test_unknown_control_action(self, client):
        assert client.post("/api/v1/control/explode").status_code == 422

    def test_speed(self, client):
        body = client.post("/api/v1/speed", params={"tps": 20}).json()
        assert body["status"] == "ok"


class TestAgentRoutes:

    def test_clear_then_add_without_start(self, client):
        agent = _first_agent(client)
        body = client.post(f"/api/v1/agents/{agent}/clear").json()
        assert body["agent"]["status"] == "idle"
        assert body["agent"]["pending"] == []

        body = client.post(f"/api/v1/agents/{agent}/add", params={"count": 3, "start": False}).json()
        assert body["agent"]["status"] == "idle"
        assert body["agent"]["pending"] == ["Countdown(3)"]

        body = client.post(f"/api/v1/agents/{agent}/execute").json()
        assert body["agent"]["status"] == "running"
        assert body["agent"]["current"] == "Countdown(3)"

    def test_add_front(self, client):
        agent = _first_agent(client)
        client.post(f"/api/v1/agents/{agent}/clear")
        client.post(f"/api/v1/agents/{agent}/add", params={"count": 5})
        client.post(f"/api/v1/agents/{agent}/add", params={"count": 1, "start": False})
        body = client.post(f"/api/v1/agents/{agent}/add", params={"count": 2, "front": True}).json()
        assert body["agent"]["current"] == "Countdown(5)"
        assert body["agent"]["pending"] == ["Countdown(2)", "Countdown(1)"]

    def test_pause_and_skip(self, client):
        agent = _first_agent(client)
        client.post(f"/api/v1/agents/{agent}/clear")
        client.post(f"/api/v1/agents/{agent}/add", params={"count": 5})
        client.post(f"/api/v1/agents/{agent}/add", params={"count": 1})

        body = client.post(f"/api/v1/agents/{agent}/pause").json()
        assert body["agent"]["status"] == "paused"

        body = client.post(f"/api/v1/agents/{agent}/skip", params={"count": 1}).json()
        assert body["agent"]["pending"] == []
        assert body["agent"]["current"] == "Countdown(5)"

    def test_add_repeat_requeues_on_finish(self, client):
        agent = _first_agent(client)
        client.post(f"/api/v1/agents/{agent}/clear")
        body = client.post(f"/api/v1/agents/{agent}/add", params={"count": 1, "repeat": True}).json()
        assert body["agent"]["current"] == "Countdown(1)"

        client.post("/api/v1/control/step")
        body = client.get(f"/api/v1/agents/{agent}").json()
        assert body["current"] == "Countdown(1)"
        events = client.get(f"/api/v1/agents/{agent}/events").json()
        assert any(ev["category"] == "repeat" for ev in events)

    def test_unknown_agent_404(self, client):
        assert client.post("/api/v1/agents/999/next").status_code == 404

    def test_unknown_operation_422(self, client):
        agent = _first_agent(client)
        assert client.post(f"/api/v1/agents/{agent}/explode").status_code == 422

    def test_despawn_then_teardown_on_step(self, client):
        agent = _first_agent(client)
        body = client.post(f"/api/v1/agents/{agent}/despawn").json()
        assert body["agent"]["alive"] is False

        client.post("/api/v1/control/step")
        ids = [a["id"] for a in client.get("/api/v1/state").json()["agents"]]
        assert agent not in ids
        assert client.post(f"/api/v1/agents/{agent}/despawn").status_code == 404

        events = client.get(f"/api/v1/agents/{agent}/events").json()
        assert any(ev["category"] == "despawn" for ev in events)

    def test_events_since_tick(self, client):
        client.post("/api/v1/control/step")
        client.post("/api/v1/control/step")
        events = client.get("/api/v1/events", params={"since_tick": 2}).json()
        assert all(ev["tick"] >= 2 for ev in events)
        assert len(client.get("/api/v1/events", params={"limit": 1}).json()) <= 1


class TestEventLog:

    def test_oldest_events_evicted_past_maxlen(self):
        log = EventLog(maxlen=3)
        log.append_many([SimEvent(tick=t, category="add", message=str(t)) for t in range(5)])
        assert len(log) == 3
        assert [e.tick for e in log.latest(10)] == [2, 3, 4]
        assert [e.tick for e in log.since_tick(0)] == [2, 3, 4]

    def test_unbounded_when_maxlen_is_none(self):
        log = EventLog(maxlen=None)
        log.append_many([SimEvent(tick=t, category="add", message=str(t)) for t in range(50)])
        assert len(log) == 50
