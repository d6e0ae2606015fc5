"""POST /api/v1/agents/{id}/{operation} — edit one agent's action queue."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from seqactions.api.dependencies import get_engine_manager
from seqactions.api.engine_manager import EngineManager, QueueOperation, UnknownAgentError
from seqactions.api.routes.state import serialize_agent
from seqactions.api.schemas import AgentActionResponse

router = APIRouter()


@router.post("/agents/{agent_id}/despawn", response_model=AgentActionResponse)
def despawn_agent(
    agent_id: int,
    manager: EngineManager = Depends(get_engine_manager),
) -> AgentActionResponse:
    try:
        manager.despawn(agent_id)
    except UnknownAgentError:
        raise HTTPException(status_code=404, detail=f"Agent {agent_id} not found.")
    snapshot = manager.get_snapshot()
    view = snapshot.agent(agent_id) if snapshot else None
    return AgentActionResponse(
        status="ok",
        message=f"Agent {agent_id} despawned; its queue is torn down on the next tick.",
        agent=serialize_agent(view) if view else None,
    )


@router.post("/agents/{agent_id}/{operation}", response_model=AgentActionResponse)
def modify_agent(
    agent_id: int,
    operation: QueueOperation,
    count: int = Query(1, ge=0, le=1000, description="Countdown length for add, number of actions for skip"),
    front: bool = Query(False, description="add: insert at the front of the queue"),
    start: bool = Query(True, description="add: start the action if the agent is idle"),
    repeat: bool = Query(False, description="add: requeue the action at the back each time it finishes"),
    manager: EngineManager = Depends(get_engine_manager),
) -> AgentActionResponse:
    try:
        manager.modify(agent_id, operation, count=count, front=front, start=start, repeat=repeat)
    except UnknownAgentError:
        raise HTTPException(status_code=404, detail=f"Agent {agent_id} not found.")
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    snapshot = manager.get_snapshot()
    view = snapshot.agent(agent_id) if snapshot else None
    return AgentActionResponse(
        status="ok",
        message=f"{operation.value} applied to agent {agent_id}.",
        agent=serialize_agent(view) if view else None,
    )
