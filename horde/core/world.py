"""World-query interface consumed by the AI core, plus a grid-backed arena.

The AI core never owns the player, terrain or physics.  It asks the
embedding game through ``WorldQuery``; ``ArenaWorld`` is the reference
implementation used by the CLI, the diagnostics server and tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from horde.core.grid import OccupancyGrid
from horde.core.models import Vector2, ZERO

PLAYER_ID = 0


@dataclass(frozen=True, slots=True)
class Target:
    """Something an agent may pursue (normally the player vehicle)."""

    id: int
    pos: Vector2
    velocity: Vector2 = ZERO


class WorldQuery(ABC):
    """Read-only view of the world outside the AI core."""

    @abstractmethod
    def get_player_position(self) -> Vector2 | None:
        """Current player position, or None when there is no player."""

    @abstractmethod
    def get_player_velocity(self) -> Vector2 | None: ...

    @abstractmethod
    def get_nearby_targets(self, position: Vector2, radius: float) -> list[Target]: ...

    @abstractmethod
    def has_line_of_sight(self, a: Vector2, b: Vector2) -> bool: ...

    @abstractmethod
    def is_cell_walkable(self, cell: tuple[int, int]) -> bool: ...

    @property
    @abstractmethod
    def grid(self) -> OccupancyGrid: ...

    def is_position_walkable(self, pos: Vector2) -> bool:
        return self.is_cell_walkable(self.grid.world_to_cell(pos))

    def get_target(self, target_id: int) -> Target | None:
        """Resolve an opaque target id; None means "not found"."""
        if target_id != PLAYER_ID:
            return None
        pos = self.get_player_position()
        if pos is None:
            return None
        return Target(PLAYER_ID, pos, self.get_player_velocity() or ZERO)


class ArenaWorld(WorldQuery):
    """Occupancy-grid arena with a single externally driven player."""

    def __init__(self, grid: OccupancyGrid) -> None:
        self._grid = grid
        self.player_pos: Vector2 | None = Vector2()
        self.player_velocity: Vector2 = ZERO

    @property
    def grid(self) -> OccupancyGrid:
        return self._grid

    def set_player(self, pos: Vector2 | None, velocity: Vector2 = ZERO) -> None:
        self.player_pos = pos
        self.player_velocity = velocity

    def get_player_position(self) -> Vector2 | None:
        return self.player_pos

    def get_player_velocity(self) -> Vector2 | None:
        if self.player_pos is None:
            return None
        return self.player_velocity

    def get_nearby_targets(self, position: Vector2, radius: float) -> list[Target]:
        if self.player_pos is None or self.player_pos.distance(position) > radius:
            return []
        return [Target(PLAYER_ID, self.player_pos, self.player_velocity)]

    def has_line_of_sight(self, a: Vector2, b: Vector2) -> bool:
        return self._grid.line_of_sight(a, b)

    def is_cell_walkable(self, cell: tuple[int, int]) -> bool:
        return self._grid.is_walkable(cell)
