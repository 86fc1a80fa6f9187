"""GET /api/v1/config: expose the AI configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from horde.api.dependencies import get_engine_manager
from horde.api.engine_manager import EngineManager
from horde.api.schemas import AIConfigResponse

router = APIRouter()


@router.get("/config", response_model=AIConfigResponse)
def get_config(
    manager: EngineManager = Depends(get_engine_manager),
) -> AIConfigResponse:
    cfg = manager.config
    return AIConfigResponse(
        seed=cfg.seed,
        grid_width=cfg.grid_width,
        grid_height=cfg.grid_height,
        cell_size=cfg.cell_size,
        max_agents=cfg.max_agents,
        tick_rate=manager.tick_rate,
        decision_interval=cfg.decision_interval,
        pathfinding_interval=cfg.pathfinding_interval,
        lod_interval=cfg.lod_interval,
        min_difficulty=cfg.min_difficulty,
        max_difficulty=cfg.max_difficulty,
        evaluation_interval=cfg.evaluation_interval,
        adjustment_rate=cfg.adjustment_rate,
        performance_thresholds=list(cfg.performance_thresholds),
        min_spawn_radius=cfg.min_spawn_radius,
        max_spawn_radius=cfg.max_spawn_radius,
        despawn_distance=cfg.despawn_distance,
        lod_distances=list(cfg.lod_distances),
        group_radius=cfg.group_radius,
    )
