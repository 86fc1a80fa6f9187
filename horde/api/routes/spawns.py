"""GET /api/v1/spawns: spawn request statistics and pattern weighting."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from horde.api.dependencies import get_engine_manager
from horde.api.engine_manager import EngineManager
from horde.api.schemas import SpawnStatsResponse

router = APIRouter()


@router.get("/spawns", response_model=SpawnStatsResponse)
def get_spawns(manager: EngineManager = Depends(get_engine_manager)) -> SpawnStatsResponse:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No snapshot available yet.")
    # Weights are a pure function of config and difficulty
    weights = manager.system.spawner.pattern_weights(snapshot.difficulty)
    return SpawnStatsResponse(**dict(snapshot.spawn_stats), pattern_weights=weights)
