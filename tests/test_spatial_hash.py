"""Tests for the agent spatial index."""

import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from horde.core.models import Vector2
from horde.systems.spatial_hash import SpatialHash


class TestQueryRadius:
    def test_exact_distance_not_bucket_superset(self):
        sh = SpatialHash(cell_size=25.0)
        sh.insert(1, Vector2(0.0, 0.0))
        sh.insert(2, Vector2(24.0, 0.0))
        sh.insert(3, Vector2(10.0, 0.0))
        assert sh.query_radius(Vector2(), 12.0) == [1, 3]

    def test_boundary_is_inclusive(self):
        sh = SpatialHash()
        sh.insert(1, Vector2(30.0, 40.0))
        assert sh.query_radius(Vector2(), 50.0) == [1]

    def test_results_ordered_by_id(self):
        sh = SpatialHash(cell_size=5.0)
        for aid, x in ((9, -40.0), (2, 40.0), (5, 0.0)):
            sh.insert(aid, Vector2(x, 0.0))
        assert sh.query_radius(Vector2(), 50.0) == [2, 5, 9]

    def test_exclude_drops_asking_agent(self):
        sh = SpatialHash()
        sh.insert(1, Vector2())
        sh.insert(2, Vector2(1.0, 1.0))
        assert sh.query_radius(Vector2(), 10.0, exclude=1) == [2]

    def test_negative_coordinates(self):
        sh = SpatialHash(cell_size=10.0)
        sh.insert(1, Vector2(-0.5, -0.5))
        sh.insert(2, Vector2(-95.0, -95.0))
        assert sh.query_radius(Vector2(0.5, 0.5), 2.0) == [1]


class TestMaintenance:
    def test_move_across_buckets(self):
        sh = SpatialHash(cell_size=10.0)
        sh.insert(1, Vector2())
        sh.move(1, Vector2(100.0, 0.0))
        assert sh.query_radius(Vector2(), 20.0) == []
        assert sh.query_radius(Vector2(100.0, 0.0), 1.0) == [1]
        assert sh.position(1) == Vector2(100.0, 0.0)

    def test_move_within_bucket_updates_position(self):
        sh = SpatialHash(cell_size=100.0)
        sh.insert(1, Vector2())
        sh.move(1, Vector2(30.0, 0.0))
        assert sh.query_radius(Vector2(), 10.0) == []

    def test_remove_and_clear(self):
        sh = SpatialHash()
        sh.insert(1, Vector2())
        sh.insert(2, Vector2(5.0, 0.0))
        sh.remove(1)
        sh.remove(1)
        assert 1 not in sh
        assert len(sh) == 1
        sh.clear()
        assert len(sh) == 0
        assert sh.query_radius(Vector2(), 100.0) == []

    def test_rejects_non_positive_cell_size(self):
        with pytest.raises(ValueError):
            SpatialHash(cell_size=0.0)
