"""GET /api/v1/map: static occupancy grid (fetch once)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from horde.api.dependencies import get_engine_manager
from horde.api.engine_manager import EngineManager
from horde.api.schemas import MapResponse

router = APIRouter()


@router.get("/map", response_model=MapResponse)
def get_map(manager: EngineManager = Depends(get_engine_manager)) -> MapResponse:
    grid = manager.get_grid()
    if grid is None:
        raise HTTPException(status_code=503, detail="AI system not initialized yet.")
    return MapResponse(width=grid.width, height=grid.height, cell_size=grid.cell_size, grid=grid.rle())
