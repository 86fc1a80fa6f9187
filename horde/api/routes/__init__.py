"""Versioned API route modules."""

from fastapi import APIRouter

from horde.api.routes.agents import router as agents_router
from horde.api.routes.config import router as config_router
from horde.api.routes.control import router as control_router
from horde.api.routes.difficulty import router as difficulty_router
from horde.api.routes.map import router as map_router
from horde.api.routes.spawns import router as spawns_router
from horde.api.routes.state import router as state_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(map_router, tags=["Map"])
api_router.include_router(state_router, tags=["State"])
api_router.include_router(agents_router, tags=["Agents"])
api_router.include_router(difficulty_router, tags=["Difficulty"])
api_router.include_router(spawns_router, tags=["Spawns"])
api_router.include_router(control_router, tags=["Control"])
api_router.include_router(config_router, tags=["Config"])

__all__ = ["api_router"]
