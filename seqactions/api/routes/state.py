"""GET /api/v1/state — agent queues & event feed (polled by UI)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from seqactions.api.dependencies import get_engine_manager
from seqactions.api.engine_manager import EngineManager
from seqactions.api.schemas import (
    AgentSchema,
    EventSchema,
    SimulationStats,
    WorldStateResponse,
)

router = APIRouter()


def serialize_agent(view) -> AgentSchema:
    return AgentSchema(
        id=view.id,
        kind=view.kind,
        alive=view.alive,
        status=view.status.name.lower(),
        current=view.current,
        pending=list(view.pending),
        deferred=view.deferred,
    )


@router.get("/state", response_model=WorldStateResponse)
def get_state(
    since_tick: int = Query(0, ge=0, description="Only return events since this tick"),
    manager: EngineManager = Depends(get_engine_manager),
) -> WorldStateResponse:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No snapshot available yet.")

    agents = [serialize_agent(v) for v in snapshot.agents]
    events = [
        EventSchema(tick=ev.tick, category=ev.category, message=ev.message, entity_ids=list(ev.entity_ids))
        for ev in manager.event_log.since_tick(since_tick)
    ]
    return WorldStateResponse(
        tick=snapshot.tick,
        agent_count=len(agents),
        running_count=snapshot.running_count,
        agents=agents,
        events=events,
    )


@router.get("/events", response_model=list[EventSchema])
def get_events(
    since_tick: int = Query(0, ge=0, description="Only return events since this tick"),
    limit: int = Query(500, ge=1, le=10_000),
    manager: EngineManager = Depends(get_engine_manager),
) -> list[EventSchema]:
    events = manager.event_log.since_tick(since_tick)[-limit:]
    return [
        EventSchema(tick=ev.tick, category=ev.category, message=ev.message, entity_ids=list(ev.entity_ids))
        for ev in events
    ]


@router.get("/agents/{agent_id}", response_model=AgentSchema)
def get_agent(
    agent_id: int,
    manager: EngineManager = Depends(get_engine_manager),
) -> AgentSchema:
    snapshot = manager.get_snapshot()
    view = snapshot.agent(agent_id) if snapshot else None
    if view is None:
        raise HTTPException(status_code=404, detail=f"Agent {agent_id} not found.")
    return serialize_agent(view)


@router.get("/agents/{agent_id}/events", response_model=list[EventSchema])
def get_agent_events(
    agent_id: int,
    manager: EngineManager = Depends(get_engine_manager),
) -> list[EventSchema]:
    return [
        EventSchema(tick=ev.tick, category=ev.category, message=ev.message, entity_ids=list(ev.entity_ids))
        for ev in manager.event_log.for_entity(agent_id)
    ]


@router.get("/stats", response_model=SimulationStats)
def get_stats(
    manager: EngineManager = Depends(get_engine_manager),
) -> SimulationStats:
    snapshot = manager.get_snapshot()
    return SimulationStats(
        tick=snapshot.tick if snapshot else 0,
        agent_count=len(snapshot.agents) if snapshot else 0,
        running_count=snapshot.running_count if snapshot else 0,
        total_spawned=manager.total_spawned,
        total_despawned=manager.total_despawned,
        running=manager.running,
        paused=manager.paused,
    )
