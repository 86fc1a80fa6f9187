"""Bucketed index of agent positions for radius queries.

Agents are filed under square buckets of ``cell_size`` world units and
their last known position is kept alongside, so a radius query answers
with exact distances rather than a bucket-level superset.  Results are
ordered by agent id, which keeps every caller deterministic.
"""

from __future__ import annotations

import math
from collections import defaultdict

from horde.core.models import Vector2

BucketKey = tuple[int, int]


class SpatialHash:
    """Maps agent ids to positions, bucketed for neighbourhood queries."""

    __slots__ = ("_cell_size", "_buckets", "_positions")

    def __init__(self, cell_size: float = 25.0) -> None:
        if cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {cell_size}")
        self._cell_size = cell_size
        self._buckets: dict[BucketKey, set[int]] = defaultdict(set)
        self._positions: dict[int, Vector2] = {}

    def __len__(self) -> int:
        return len(self._positions)

    def __contains__(self, agent_id: int) -> bool:
        return agent_id in self._positions

    def _bucket(self, pos: Vector2) -> BucketKey:
        return math.floor(pos.x / self._cell_size), math.floor(pos.y / self._cell_size)

    def position(self, agent_id: int) -> Vector2 | None:
        return self._positions.get(agent_id)

    def insert(self, agent_id: int, pos: Vector2) -> None:
        if agent_id in self._positions:
            self.move(agent_id, pos)
            return
        self._positions[agent_id] = pos
        self._buckets[self._bucket(pos)].add(agent_id)

    def remove(self, agent_id: int) -> None:
        pos = self._positions.pop(agent_id, None)
        if pos is None:
            return
        key = self._bucket(pos)
        bucket = self._buckets.get(key)
        if bucket is not None:
            bucket.discard(agent_id)
            if not bucket:
                del self._buckets[key]

    def move(self, agent_id: int, new_pos: Vector2) -> None:
        old_pos = self._positions.get(agent_id)
        if old_pos is None:
            self.insert(agent_id, new_pos)
            return
        if self._bucket(old_pos) != self._bucket(new_pos):
            self.remove(agent_id)
            self.insert(agent_id, new_pos)
        else:
            self._positions[agent_id] = new_pos

    def query_radius(self, pos: Vector2, radius: float, exclude: int | None = None) -> list[int]:
        """Ids of agents within *radius* of *pos* (inclusive), ascending.

        *exclude* drops one id, normally the asking agent.
        """
        if radius < 0:
            return []
        cx, cy = self._bucket(pos)
        reach = math.floor(radius / self._cell_size) + 1
        found: list[int] = []
        for dx in range(-reach, reach + 1):
            for dy in range(-reach, reach + 1):
                bucket = self._buckets.get((cx + dx, cy + dy))
                if not bucket:
                    continue
                for agent_id in bucket:
                    if agent_id != exclude and self._positions[agent_id].distance(pos) <= radius:
                        found.append(agent_id)
        found.sort()
        return found

    def clear(self) -> None:
        self._buckets.clear()
        self._positions.clear()
