"""A* pathfinding over grid cells.

Provides a `Pathfinder` class that computes minimal-hop paths between
grid cells, respecting a walkability callable (normally the world's
`is_cell_walkable`, so obstacles owned by the game are honoured).
Every hop (orthogonal or diagonal) costs 1, so the heuristic is Chebyshev
distance for 8-directional search and Manhattan distance for
4-directional search; both are admissible for their neighbourhood.

Usage:
    pf = Pathfinder(world.is_cell_walkable)
    path = pf.find_path((0, 0), (12, 7))      # list[(x, y)] or None
    next_cell = pf.next_step((0, 0), (12, 7))  # (x, y) or None
"""

from __future__ import annotations

import heapq
from typing import Callable

Cell = tuple[int, int]
Walkable = Callable[[Cell], bool]

_ORTHOGONAL = ((1, 0), (-1, 0), (0, 1), (0, -1))
_DIAGONAL = ((1, 1), (1, -1), (-1, 1), (-1, -1))


# ---------------------------------------------------------------------------
# A* Pathfinder
# ---------------------------------------------------------------------------

class Pathfinder:
    """A* pathfinder over cells judged by a walkability callable.

    Holds no per-search state; safe to share between agents.
    With `avoid_corner_squeeze` a diagonal hop between two blocked
    orthogonal neighbours is refused; by default it is allowed.
    Performance-bounded: explores at most `max_nodes` before giving up.
    Ties between equal f-scores go to the node discovered first.
    """

    __slots__ = ("_walkable", "_max_nodes", "_dirs", "_diagonal", "_avoid_squeeze")

    def __init__(
        self,
        is_walkable: Walkable,
        max_nodes: int = 4000,
        allow_diagonal: bool = True,
        avoid_corner_squeeze: bool = False,
    ) -> None:
        self._walkable = is_walkable
        self._avoid_squeeze = avoid_corner_squeeze
        self._max_nodes = max_nodes
        self._diagonal = allow_diagonal
        self._dirs = _ORTHOGONAL + _DIAGONAL if allow_diagonal else _ORTHOGONAL

    def _heuristic(self, x: int, y: int, gx: int, gy: int) -> int:
        dx = abs(x - gx)
        dy = abs(y - gy)
        if self._diagonal:
            return max(dx, dy)
        return dx + dy

    def find_path(self, start: Cell, goal: Cell) -> list[Cell] | None:
        """Compute an A* path from *start* to *goal*.

        Returns the cells to visit (excluding *start*, including *goal*),
        an empty list when start equals goal, or None when the goal is
        blocked, unreachable, or the node budget runs out.
        """
        if start == goal:
            return []

        walkable = self._walkable
        if not walkable(goal):
            return None

        # A* open set: (f_score, counter, x, y)
        counter = 0
        open_heap: list[tuple[int, int, int, int]] = []
        heapq.heappush(open_heap, (0, counter, start[0], start[1]))

        g_score: dict[Cell, int] = {start: 0}
        came_from: dict[Cell, Cell] = {}
        closed: set[Cell] = set()
        nodes_explored = 0

        gx, gy = goal

        while open_heap and nodes_explored < self._max_nodes:
            _, _, cx, cy = heapq.heappop(open_heap)
            ckey = (cx, cy)

            if cx == gx and cy == gy:
                return self._reconstruct(came_from, ckey)

            if ckey in closed:
                continue
            closed.add(ckey)
            nodes_explored += 1

            tentative_g = g_score[ckey] + 1

            for dx, dy in self._dirs:
                nx, ny = cx + dx, cy + dy
                nkey = (nx, ny)

                if nkey in closed or not walkable(nkey):
                    continue

                if (
                    self._avoid_squeeze and dx and dy
                    and not walkable((cx + dx, cy)) and not walkable((cx, cy + dy))
                ):
                    continue

                if tentative_g < g_score.get(nkey, 1 << 30):
                    g_score[nkey] = tentative_g
                    came_from[nkey] = ckey
                    counter += 1
                    f = tentative_g + self._heuristic(nx, ny, gx, gy)
                    heapq.heappush(open_heap, (f, counter, nx, ny))

        return None  # No path found within budget

    def next_step(self, start: Cell, goal: Cell) -> Cell | None:
        """Return the first cell of the A* path, or None if no path exists."""
        path = self.find_path(start, goal)
        if path:
            return path[0]
        return None

    @staticmethod
    def _reconstruct(came_from: dict[Cell, Cell], current: Cell) -> list[Cell]:
        """Walk back through came_from to build the path."""
        path: list[Cell] = []
        while current in came_from:
            path.append(current)
            current = came_from[current]
        path.reverse()
        return path
