"""Pydantic response models for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field


# --- Agents ---

class AgentSchema(BaseModel):
    id: int
    kind: str
    alive: bool
    status: str = Field(description="idle | running | paused")
    current: str | None = None
    pending: list[str] = Field(default_factory=list)
    deferred: int = 0


# --- World State ---

class EventSchema(BaseModel):
    tick: int
    category: str
    message: str
    entity_ids: list[int] = Field(default_factory=list)


class WorldStateResponse(BaseModel):
    tick: int
    agent_count: int
    running_count: int
    agents: list[AgentSchema]
    events: list[EventSchema] = Field(default_factory=list)


# --- Control ---

class ControlResponse(BaseModel):
    status: str
    message: str
    tick: int = 0


class AgentActionResponse(BaseModel):
    status: str
    message: str
    agent: AgentSchema | None = None


# --- Config ---

class SimulationConfigResponse(BaseModel):
    world_seed: int
    max_ticks: int
    strict_reentrancy: bool
    max_chain_length: int
    default_order: str
    default_start: bool
    initial_agent_count: int
    plan_length: int
    countdown_min: int
    countdown_max: int
    pause_chance: float
    despawn_chance: float
    respawn: bool
    tick_rate: float


# --- Stats ---

class SimulationStats(BaseModel):
    tick: int
    agent_count: int
    running_count: int
    total_spawned: int
    total_despawned: int
    running: bool
    paused: bool
