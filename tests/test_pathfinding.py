"""Unit tests for A* pathfinding and the occupancy grid."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from horde.ai.pathfinding import Pathfinder
from horde.core.grid import OccupancyGrid
from horde.core.models import Vector2


def _grid(w: int = 10, h: int = 10) -> OccupancyGrid:
    return OccupancyGrid(w, h, cell_size=5.0)


# ---------------------------------------------------------------------------
# Basic A* tests
# ---------------------------------------------------------------------------

class TestAStarBasic:
    def test_straight_line_path(self):
        pf = Pathfinder(_grid().is_walkable, allow_diagonal=False)
        path = pf.find_path((0, 0), (4, 0))
        assert path == [(1, 0), (2, 0), (3, 0), (4, 0)]

    def test_same_start_and_goal(self):
        pf = Pathfinder(_grid().is_walkable)
        assert pf.find_path((3, 3), (3, 3)) == []

    def test_adjacent_goal(self):
        pf = Pathfinder(_grid().is_walkable)
        assert pf.find_path((5, 5), (6, 5)) == [(6, 5)]

    def test_diagonal_hops_cost_one(self):
        pf = Pathfinder(_grid().is_walkable)
        path = pf.find_path((0, 0), (4, 4))
        assert path is not None
        assert len(path) == 4
        assert path[-1] == (4, 4)

    def test_four_directional_uses_manhattan_length(self):
        pf = Pathfinder(_grid().is_walkable, allow_diagonal=False)
        path = pf.find_path((0, 0), (3, 2))
        assert path is not None
        assert len(path) == 5
        for a, b in zip([(0, 0)] + path, path):
            assert abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1

    def test_path_around_wall(self):
        g = _grid()
        for y in range(5):
            g.set_blocked((3, y))
        pf = Pathfinder(g.is_walkable)
        path = pf.find_path((2, 2), (4, 2))
        assert path is not None
        assert len(path) > 2
        assert path[-1] == (4, 2)
        for step in path:
            assert g.is_walkable(step), f"Step {step} is blocked"

    def test_no_path_to_enclosed_goal(self):
        g = _grid()
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if dx or dy:
                    g.set_blocked((5 + dx, 5 + dy))
        assert Pathfinder(g.is_walkable).find_path((0, 0), (5, 5)) is None

    def test_blocked_goal(self):
        g = _grid()
        g.set_blocked((5, 5))
        assert Pathfinder(g.is_walkable).find_path((0, 0), (5, 5)) is None

    def test_out_of_bounds_goal(self):
        assert Pathfinder(_grid().is_walkable).find_path((0, 0), (20, 20)) is None

    def test_diagonal_between_blocked_corners_allowed_by_default(self):
        g = _grid(3, 3)
        g.set_blocked((1, 0))
        g.set_blocked((0, 1))
        assert Pathfinder(g.is_walkable).find_path((0, 0), (1, 1)) == [(1, 1)]

    def test_corner_squeeze_refused_when_enabled(self):
        g = _grid(3, 3)
        g.set_blocked((1, 0))
        g.set_blocked((0, 1))
        pf = Pathfinder(g.is_walkable, avoid_corner_squeeze=True)
        assert pf.find_path((0, 0), (1, 1)) is None

    def test_node_budget_exhausted(self):
        g = _grid(50, 50)
        pf = Pathfinder(g.is_walkable, max_nodes=5)
        assert pf.find_path((0, 0), (49, 49)) is None

    def test_walkability_callable_overrides_grid(self):
        g = _grid()
        pf = Pathfinder(lambda cell: g.is_walkable(cell) and cell[0] != 5)
        path = pf.find_path((0, 0), (9, 0))
        assert path is None

        pf = Pathfinder(lambda cell: g.is_walkable(cell) and cell != (5, 0))
        path = pf.find_path((0, 0), (9, 0))
        assert path is not None
        assert (5, 0) not in path
        assert path[-1] == (9, 0)

    def test_next_step(self):
        pf = Pathfinder(_grid().is_walkable, allow_diagonal=False)
        assert pf.next_step((0, 0), (3, 0)) == (1, 0)
        assert pf.next_step((0, 0), (0, 0)) is None


# ---------------------------------------------------------------------------
# Occupancy grid
# ---------------------------------------------------------------------------

class TestOccupancyGrid:
    def test_world_origin_is_grid_centre(self):
        g = _grid(10, 10)
        assert g.world_to_cell(Vector2(0.1, 0.1)) == (5, 5)
        assert g.world_to_cell(Vector2(-0.1, -0.1)) == (4, 4)

    def test_cell_to_world_returns_centre(self):
        g = _grid(10, 10)
        centre = g.cell_to_world((5, 5))
        assert centre == Vector2(2.5, 2.5)
        assert g.world_to_cell(centre) == (5, 5)

    def test_outside_map_is_not_walkable(self):
        g = _grid(10, 10)
        assert not g.is_position_walkable(Vector2(1000.0, 0.0))
        assert g.is_position_walkable(Vector2(0.0, 0.0))

    def test_block_rect_is_inclusive_and_clipped(self):
        g = _grid(10, 10)
        g.block_rect(8, 8, 12, 12)
        assert g.blocked_count() == 4

    def test_line_of_sight_blocked_by_wall(self):
        g = _grid(10, 10)
        for y in range(10):
            g.set_blocked((5, y))
        assert not g.has_line_of_sight(2, 2, 8, 2)
        assert g.has_line_of_sight(2, 2, 4, 8)

    def test_line_of_sight_ignores_endpoints(self):
        g = _grid(10, 10)
        g.set_blocked((8, 2))
        assert g.has_line_of_sight(2, 2, 8, 2)

    def test_rle_covers_every_cell(self):
        g = _grid(10, 10)
        g.block_rect(0, 0, 9, 0)
        rle = g.rle()
        assert rle[:2] == [1, 10]
        assert sum(rle[i + 1] for i in range(0, len(rle), 2)) == 100
