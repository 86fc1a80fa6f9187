"""Enumerations used throughout the AI core."""

from __future__ import annotations

from enum import IntEnum, unique


@unique
class AgentState(IntEnum):
    """Default state-machine states for a hostile agent."""

    IDLE = 0
    WANDERING = 1
    CHASING = 2
    ATTACKING = 3
    STUNNED = 4
    DYING = 5           # Terminal; removed at end of tick


@unique
class SpawnStatus(IntEnum):
    """Lifecycle of a spawn request."""

    PENDING = 0
    FULFILLED = 1
    FAILED = 2


@unique
class Domain(IntEnum):
    """RNG domains for deterministic randomness isolation."""

    SPAWN_PATTERN = 0
    SPAWN_POSITION = 1
    SPAWN_TYPE = 2
    AI_DECISION = 3
    WANDER = 4
    COMBAT = 5
    DRIVER = 6


@unique
class LODTier(IntEnum):
    """Level-of-detail tiers; higher tiers do less work per tick."""

    FULL = 0
    REDUCED = 1
    MINIMAL = 2
    FROZEN = 3
