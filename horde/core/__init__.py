"""Core data models and world representation."""

from horde.core.enums import AgentState, Domain, LODTier, SpawnStatus
from horde.core.models import Agent, Vector2
from horde.core.grid import OccupancyGrid
from horde.core.world import ArenaWorld, Target, WorldQuery
from horde.core.snapshot import Snapshot

__all__ = [
    "Agent",
    "AgentState",
    "ArenaWorld",
    "Domain",
    "LODTier",
    "OccupancyGrid",
    "Snapshot",
    "SpawnStatus",
    "Target",
    "Vector2",
    "WorldQuery",
]
