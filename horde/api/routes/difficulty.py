"""Difficulty diagnostics and the manual difficulty override."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from horde.api.dependencies import get_engine_manager
from horde.api.engine_manager import EngineManager
from horde.api.schemas import (
    ControlResponse,
    DifficultyOverrideRequest,
    DifficultyRecordSchema,
    DifficultyResponse,
)

router = APIRouter()


@router.get("/difficulty", response_model=DifficultyResponse)
def get_difficulty(manager: EngineManager = Depends(get_engine_manager)) -> DifficultyResponse:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No snapshot available yet.")
    cfg = manager.config
    return DifficultyResponse(
        level=snapshot.difficulty,
        overridden=snapshot.difficulty_overridden,
        min_difficulty=cfg.min_difficulty,
        max_difficulty=cfg.max_difficulty,
        performance=snapshot.performance,
        breakdown=dict(snapshot.performance_breakdown),
        metrics=dict(snapshot.performance_metrics),
        history=[DifficultyRecordSchema(**r.to_dict()) for r in snapshot.difficulty_history],
    )


@router.post("/difficulty/override", response_model=ControlResponse)
def set_override(
    body: DifficultyOverrideRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    applied = manager.set_difficulty_override(body.level)
    return ControlResponse(
        status="ok",
        message=f"Difficulty overridden to {applied:.2f}.",
        tick=manager.current_tick,
    )


@router.delete("/difficulty/override", response_model=ControlResponse)
def clear_override(manager: EngineManager = Depends(get_engine_manager)) -> ControlResponse:
    manager.clear_difficulty_override()
    return ControlResponse(
        status="ok",
        message="Difficulty override cleared.",
        tick=manager.current_tick,
    )

