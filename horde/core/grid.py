"""Occupancy grid shared by pathfinding, spawning and line of sight."""

from __future__ import annotations

import math

from horde.core.models import Vector2


class OccupancyGrid:
    """2D walkable/blocked grid backed by a flat list.

    Cells are square with side ``cell_size`` world units; cell (0, 0)
    covers world coordinates centred on the grid, so the world origin
    sits in the middle of the map.
    """

    __slots__ = ("width", "height", "cell_size", "_blocked", "_origin")

    def __init__(self, width: int, height: int, cell_size: float = 5.0) -> None:
        self.width = width
        self.height = height
        self.cell_size = cell_size
        self._blocked: list[bool] = [False] * (width * height)
        self._origin = Vector2(-width * cell_size / 2.0, -height * cell_size / 2.0)

    # -- access --

    def _idx(self, x: int, y: int) -> int:
        return y * self.width + x

    def in_bounds(self, cell: tuple[int, int]) -> bool:
        return 0 <= cell[0] < self.width and 0 <= cell[1] < self.height

    def is_walkable(self, cell: tuple[int, int]) -> bool:
        x, y = cell
        if not (0 <= x < self.width and 0 <= y < self.height):
            return False
        return not self._blocked[self._idx(x, y)]

    def set_blocked(self, cell: tuple[int, int], blocked: bool = True) -> None:
        if self.in_bounds(cell):
            self._blocked[self._idx(cell[0], cell[1])] = blocked

    def block_rect(self, x0: int, y0: int, x1: int, y1: int) -> None:
        """Block every cell in the inclusive rectangle."""
        for y in range(max(0, y0), min(self.height, y1 + 1)):
            for x in range(max(0, x0), min(self.width, x1 + 1)):
                self._blocked[self._idx(x, y)] = True

    def blocked_count(self) -> int:
        return sum(self._blocked)

    # -- coordinate conversion --

    def world_to_cell(self, pos: Vector2) -> tuple[int, int]:
        return (
            math.floor((pos.x - self._origin.x) / self.cell_size),
            math.floor((pos.y - self._origin.y) / self.cell_size),
        )

    def cell_to_world(self, cell: tuple[int, int]) -> Vector2:
        """Centre of *cell* in world coordinates."""
        return Vector2(
            self._origin.x + (cell[0] + 0.5) * self.cell_size,
            self._origin.y + (cell[1] + 0.5) * self.cell_size,
        )

    def is_position_walkable(self, pos: Vector2) -> bool:
        return self.is_walkable(self.world_to_cell(pos))

    # -- line-of-sight (Bresenham) --

    def has_line_of_sight(self, x0: int, y0: int, x1: int, y1: int) -> bool:
        """Check if there is a clear line of sight between two cells.

        Uses Bresenham's line algorithm. Returns False if any blocked cell
        lies on the line between (x0,y0) and (x1,y1), exclusive of endpoints.
        """
        dx = abs(x1 - x0)
        dy = abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1
        err = dx - dy
        cx, cy = x0, y0
        while True:
            if cx == x1 and cy == y1:
                return True
            e2 = 2 * err
            if e2 > -dy:
                err -= dy
                cx += sx
            if e2 < dx:
                err += dx
                cy += sy
            if (cx != x1 or cy != y1) and not self.is_walkable((cx, cy)):
                return False

    def line_of_sight(self, a: Vector2, b: Vector2) -> bool:
        ax, ay = self.world_to_cell(a)
        bx, by = self.world_to_cell(b)
        return self.has_line_of_sight(ax, ay, bx, by)

    # -- serialization helpers --

    def rle(self) -> list[int]:
        """Run-length encode the blocked flags as [value, count, ...]."""
        out: list[int] = []
        if not self._blocked:
            return out
        cur = int(self._blocked[0])
        count = 1
        for flag in self._blocked[1:]:
            v = int(flag)
            if v == cur:
                count += 1
            else:
                out.extend((cur, count))
                cur, count = v, 1
        out.extend((cur, count))
        return out
