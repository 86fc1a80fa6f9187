"""GET /api/v1/state and /events: live agent, group and event data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Depends, HTTPException, Query

from horde.api.dependencies import get_engine_manager
from horde.api.engine_manager import EngineManager
from horde.api.schemas import (
    AgentSchema,
    EventSchema,
    EventsResponse,
    GroupSchema,
    SessionStats,
    StateResponse,
)
from horde.core.models import Vector2

if TYPE_CHECKING:
    from horde.core.models import Agent
    from horde.engine.events import AIEvent

router = APIRouter()


def _serialize_value(value: Any) -> Any:
    if isinstance(value, Vector2):
        return [value.x, value.y]
    if isinstance(value, (list, tuple)):
        return [_serialize_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _serialize_value(v) for k, v in value.items()}
    return value


def _serialize_agent(a: Agent) -> AgentSchema:
    return AgentSchema(
        id=a.id,
        archetype=a.archetype,
        x=a.pos.x,
        y=a.pos.y,
        vx=a.velocity.x,
        vy=a.velocity.y,
        health=a.health,
        max_health=a.max_health,
        state=a.state.name.lower(),
        cursor=a.cursor,
        target_id=a.target_id,
        group_id=a.group_id,
        lod=int(a.lod),
        alert=a.alert,
        speed_multiplier=a.speed_multiplier,
    )


def _serialize_event(e: AIEvent) -> EventSchema:
    data = e.to_dict()
    data.pop("tick", None)
    data.pop("category", None)
    return EventSchema(tick=e.tick, category=e.category, message=e.message(), data=data)


@router.get("/state", response_model=StateResponse)
def get_state(
    since_tick: int = Query(0, ge=0, description="Only return events since this tick"),
    manager: EngineManager = Depends(get_engine_manager),
) -> StateResponse:
    snapshot = manager.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=503, detail="No snapshot available yet.")

    agents = [_serialize_agent(a) for _, a in sorted(snapshot.agents.items())]
    groups = [
        GroupSchema(id=g.id, leader_id=g.leader_id, members=list(g.members), target_id=g.target_id, tag=g.tag)
        for g in snapshot.groups
    ]
    events = [_serialize_event(e) for e in manager.event_log.since_tick(since_tick)]
    player = [snapshot.player_pos.x, snapshot.player_pos.y] if snapshot.player_pos else None

    return StateResponse(
        stats=SessionStats(
            tick=snapshot.tick,
            time=snapshot.time,
            agent_count=len(agents),
            state_counts=snapshot.state_counts(),
            difficulty=snapshot.difficulty,
            performance=snapshot.performance,
            total_spawned=manager.total_spawned,
            total_removed=manager.total_removed,
            running=manager.running,
            paused=manager.paused,
            tick_rate=manager.tick_rate,
        ),
        player=player,
        agents=agents,
        groups=groups,
        events=events,
    )


@router.get("/events", response_model=EventsResponse)
def get_events(
    since_tick: int = Query(0, ge=0, description="Only return events since this tick"),
    limit: int = Query(200, ge=1, le=5000),
    category: str | None = Query(None, description="Filter by event category, e.g. agent_attack"),
    manager: EngineManager = Depends(get_engine_manager),
) -> EventsResponse:
    snapshot = manager.get_snapshot()
    events = manager.event_log.since_tick(since_tick)
    if category is not None:
        events = [e for e in events if e.category == category]
    return EventsResponse(
        tick=snapshot.tick if snapshot else 0,
        events=[_serialize_event(e) for e in events[-limit:]],
    )
