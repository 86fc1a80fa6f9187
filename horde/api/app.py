"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from horde.api.dependencies import set_engine_manager
from horde.api.engine_manager import EngineManager
from horde.api.routes import api_router
from horde.config import AIConfig
from horde.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(config: AIConfig | None = None, autostart: bool = True) -> FastAPI:
    """Build and return the fully-configured FastAPI application.

    With ``autostart=False`` the engine is built but left stopped until a
    ``/control/start`` or ``/control/step`` request arrives.
    """
    if config is None:
        config = AIConfig()

    _config = config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(_config.log_level)
        manager = EngineManager(_config)
        set_engine_manager(manager)
        if autostart:
            manager.start()
        logger.info("API server started (seed=%d, autostart=%s).", _config.seed, autostart)
        yield
        manager.stop()
        set_engine_manager(None)
        logger.info("API server shutting down.")

    app = FastAPI(
        title="Horde AI",
        description=(
            "Hostile-agent AI with adaptive difficulty: diagnostics and control API.\n\n"
            "## API Groups\n\n"
            "- **State**: live agents, groups and AI events\n"
            "- **Agents**: per-agent blackboard, path and cooldowns\n"
            "- **Difficulty**: current level, performance breakdown, manual override\n"
            "- **Spawns**: spawn request statistics and pattern weights\n"
            "- **Map**: static occupancy grid (fetch once)\n"
            "- **Control**: start, pause, resume, step, reset, speed\n"
            "- **Config**: read-only AI configuration\n"
        ),
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "State", "description": "Live AI state polled by a viewer: agents, groups, events."},
            {"name": "Agents", "description": "Full per-agent AI state for debugging a single agent."},
            {"name": "Difficulty", "description": "Adaptive difficulty level, history and manual override."},
            {"name": "Spawns", "description": "Spawn pattern statistics."},
            {"name": "Map", "description": "Static occupancy grid. Obstacles do not change during a session."},
            {"name": "Control", "description": "Session lifecycle controls."},
            {"name": "Config", "description": "Read-only AI configuration parameters."},
        ],
    )

    # CORS: allow any origin in dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app
