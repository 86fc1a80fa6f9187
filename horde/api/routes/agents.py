"""GET /api/v1/agents/{agent_id}: full per-agent AI state."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from horde.api.dependencies import get_engine_manager
from horde.api.engine_manager import EngineManager
from horde.api.routes.state import _serialize_agent, _serialize_value
from horde.api.schemas import AgentDetailSchema

router = APIRouter()


@router.get("/agents/{agent_id}", response_model=AgentDetailSchema)
def get_agent(
    agent_id: int,
    manager: EngineManager = Depends(get_engine_manager),
) -> AgentDetailSchema:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No snapshot available yet.")
    agent = snapshot.agents.get(agent_id)
    if agent is None:
        raise HTTPException(status_code=404, detail=f"Agent {agent_id} not found.")

    base = _serialize_agent(agent).model_dump()
    return AgentDetailSchema(
        **base,
        damage=agent.damage,
        speed=agent.speed,
        awareness=agent.awareness,
        state_time=agent.state_time,
        attack_cooldown=agent.attack_cooldown,
        stun_remaining=agent.stun_remaining,
        ability_cooldowns=dict(agent.ability_cooldowns),
        blackboard=_serialize_value(agent.blackboard),
        move_goal=_serialize_value(agent.move_goal),
        path=_serialize_value(agent.path),
        path_index=agent.path_index,
    )
