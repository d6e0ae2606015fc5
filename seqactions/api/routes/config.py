"""GET /api/v1/config — expose simulation configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from seqactions.api.dependencies import get_engine_manager
from seqactions.api.engine_manager import EngineManager
from seqactions.api.schemas import SimulationConfigResponse

router = APIRouter()


@router.get("/config", response_model=SimulationConfigResponse)
def get_config(
    manager: EngineManager = Depends(get_engine_manager),
) -> SimulationConfigResponse:
    cfg = manager.config
    return SimulationConfigResponse(
        world_seed=cfg.world_seed,
        max_ticks=cfg.max_ticks,
        strict_reentrancy=cfg.strict_reentrancy,
        max_chain_length=cfg.max_chain_length,
        default_order=cfg.default_order.name.lower(),
        default_start=cfg.default_start,
        initial_agent_count=cfg.initial_agent_count,
        plan_length=cfg.plan_length,
        countdown_min=cfg.countdown_min,
        countdown_max=cfg.countdown_max,
        pause_chance=cfg.pause_chance,
        despawn_chance=cfg.despawn_chance,
        respawn=cfg.respawn,
        tick_rate=manager.tick_rate,
    )
