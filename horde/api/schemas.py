"""Pydantic response models for the diagnostics API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# --- Agents ---

class AgentSchema(BaseModel):
    id: int
    archetype: str
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    health: float
    max_health: float
    state: str
    cursor: str = "root"
    target_id: int | None = None
    group_id: int | None = None
    lod: int = 0
    alert: float = 0.0
    speed_multiplier: float = 1.0

    class Config:
        frozen = True


class AgentDetailSchema(AgentSchema):
    damage: float
    speed: float
    awareness: float
    state_time: float
    attack_cooldown: float = 0.0
    stun_remaining: float = 0.0
    ability_cooldowns: dict[str, float] = Field(default_factory=dict)
    blackboard: dict[str, Any] = Field(default_factory=dict)
    move_goal: list[float] | None = None
    path: list[list[float]] = Field(default_factory=list)
    path_index: int = 0


class GroupSchema(BaseModel):
    id: int
    leader_id: int | None
    members: list[int]
    target_id: int | None = None
    tag: str | None = None


# --- Events ---

class EventSchema(BaseModel):
    tick: int
    category: str
    message: str
    data: dict[str, Any] = Field(default_factory=dict)


class EventsResponse(BaseModel):
    tick: int
    events: list[EventSchema]


# --- State ---

class SessionStats(BaseModel):
    tick: int
    time: float
    agent_count: int
    state_counts: dict[str, int] = Field(default_factory=dict)
    difficulty: float
    performance: float
    total_spawned: int
    total_removed: int
    running: bool
    paused: bool
    tick_rate: float


class StateResponse(BaseModel):
    stats: SessionStats
    player: list[float] | None = None
    agents: list[AgentSchema]
    groups: list[GroupSchema] = Field(default_factory=list)
    events: list[EventSchema] = Field(default_factory=list)


# --- Difficulty ---

class DifficultyRecordSchema(BaseModel):
    timestamp: float
    difficulty: float
    performance: float
    reason: str


class DifficultyResponse(BaseModel):
    level: float
    overridden: bool
    min_difficulty: float
    max_difficulty: float
    performance: float
    breakdown: dict[str, float] = Field(default_factory=dict)
    metrics: dict[str, float] = Field(default_factory=dict)
    history: list[DifficultyRecordSchema] = Field(default_factory=list)


class DifficultyOverrideRequest(BaseModel):
    level: float = Field(gt=0.0, description="Requested difficulty; clamped to the configured bounds")


# --- Spawns ---

class SpawnStatsResponse(BaseModel):
    total_requested: int
    fulfilled: int
    failed: int
    pending: int
    spawn_efficiency: float
    spawns_by_type: dict[str, int] = Field(default_factory=dict)
    spawns_by_pattern: dict[str, int] = Field(default_factory=dict)
    pattern_distribution: dict[str, float] = Field(default_factory=dict)
    pattern_weights: dict[str, float] = Field(default_factory=dict)


# --- Map ---

class MapResponse(BaseModel):
    width: int
    height: int
    cell_size: float
    grid: list[int] = Field(description="Run-length encoded cells: [blocked, count, blocked, count, ...]")


# --- Control ---

class ControlResponse(BaseModel):
    status: str
    message: str
    tick: int = 0


# --- Config ---

class AIConfigResponse(BaseModel):
    seed: int
    grid_width: int
    grid_height: int
    cell_size: float
    max_agents: int
    tick_rate: float
    decision_interval: float
    pathfinding_interval: float
    lod_interval: float
    min_difficulty: float
    max_difficulty: float
    evaluation_interval: float
    adjustment_rate: float
    performance_thresholds: list[float]
    min_spawn_radius: float
    max_spawn_radius: float
    despawn_distance: float
    lod_distances: list[float]
    group_radius: float
