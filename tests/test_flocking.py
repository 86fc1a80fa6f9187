"""Tests for group membership, boids steering and ring formation."""

import math
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from horde.ai.flocking import GroupCoordinator, alignment, cohesion, ring_positions, separation
from horde.config import AIConfig
from horde.core.models import Agent, Vector2
from tests.helpers.group_checks import assert_groups_consistent


def _make_agent(aid: int, x: float = 0.0, y: float = 0.0, vel: Vector2 = Vector2()) -> Agent:
    return Agent(
        id=aid, archetype="swarm", pos=Vector2(x, y), health=60, max_health=60,
        damage=12, speed=30, velocity=vel,
    )


class TestBoidsRules:
    def test_cohesion_points_at_centroid(self):
        me = _make_agent(1)
        others = [_make_agent(2, 10, 0), _make_agent(3, 10, 10)]
        assert cohesion(me, others) == Vector2(10, 5)

    def test_cohesion_without_neighbours_is_zero(self):
        assert cohesion(_make_agent(1), []) == Vector2()

    def test_separation_pushes_away_from_close_neighbours(self):
        me = _make_agent(1)
        push = separation(me, [_make_agent(2, 5, 0), _make_agent(3, 100, 0)], min_spacing=30.0)
        assert push == Vector2(-1.0, 0.0)

    def test_separation_ignores_coincident_neighbours(self):
        me = _make_agent(1)
        assert separation(me, [_make_agent(2)], min_spacing=30.0) == Vector2()

    def test_alignment_matches_average_velocity(self):
        me = _make_agent(1, vel=Vector2(1, 0))
        others = [_make_agent(2, vel=Vector2(3, 0)), _make_agent(3, vel=Vector2(3, 4))]
        assert alignment(me, others) == Vector2(2, 2)


class TestRing:
    def test_points_evenly_spaced_on_radius(self):
        centre = Vector2(10, -5)
        points = ring_positions(centre, 4, 80.0)
        assert len(points) == 4
        for p in points:
            assert p.distance(centre) == pytest.approx(80.0)
        angles = sorted((p - centre).angle() % (2 * math.pi) for p in points)
        gaps = [b - a for a, b in zip(angles, angles[1:])]
        for gap in gaps:
            assert gap == pytest.approx(math.pi / 2)

    def test_empty_ring(self):
        assert ring_positions(Vector2(), 0, 50.0) == []


class TestGroupCoordinator:
    def _coord(self):
        return GroupCoordinator(AIConfig())

    def test_founder_leads(self):
        coord = self._coord()
        a = _make_agent(1)
        group = coord.create(a)
        assert group.leader_id == 1
        assert a.group_id == group.id
        assert coord.is_leader(a)

    def test_agent_in_at_most_one_group(self):
        coord = self._coord()
        a, b, c = _make_agent(1), _make_agent(2), _make_agent(3)
        g1 = coord.create(a)
        g2 = coord.create(b)
        coord.add(c, g1.id)
        coord.add(c, g2.id)
        assert c.id not in g1.members
        assert c.id in g2.members
        assert_groups_consistent(coord, {1: a, 2: b, 3: c})

    def test_leader_reelected_on_leave(self):
        coord = self._coord()
        a, b, c = _make_agent(1), _make_agent(2), _make_agent(3)
        group = coord.create(a)
        coord.add(b, group.id)
        coord.add(c, group.id)
        coord.remove(a)
        assert group.leader_id == 2
        assert a.group_id is None
        assert coord.leader_of(c) == 2

    def test_empty_group_dissolves_and_frees_tag(self):
        coord = self._coord()
        a = _make_agent(1)
        group = coord.join_tag(a, "swarm-1")
        coord.remove(a)
        assert group.id not in coord.groups
        assert coord.group_for_tag("swarm-1") is None

    def test_join_tag_reuses_group(self):
        coord = self._coord()
        a, b = _make_agent(1), _make_agent(2)
        g1 = coord.join_tag(a, "swarm-1")
        g2 = coord.join_tag(b, "swarm-1")
        assert g1 is g2
        assert g1.members == [1, 2]

    def test_steering_zero_when_ungrouped(self):
        coord = self._coord()
        a = _make_agent(1)
        assert coord.steering(a, {1: a}) == Vector2()

    def test_steering_pulls_toward_distant_member(self):
        coord = self._coord()
        a, b = _make_agent(1), _make_agent(2, 40, 0)
        group = coord.create(a)
        coord.add(b, group.id)
        steer = coord.steering(a, {1: a, 2: b})
        assert steer.x > 0

    def test_members_outside_group_radius_are_ignored(self):
        coord = self._coord()
        a, b = _make_agent(1), _make_agent(2, 500, 0)
        group = coord.create(a)
        coord.add(b, group.id)
        assert coord.steering(a, {1: a, 2: b}) == Vector2()

    def test_ring_slots_are_stable(self):
        coord = self._coord()
        agents = [_make_agent(i) for i in range(1, 5)]
        group = coord.create(agents[0])
        for a in agents[1:]:
            coord.add(a, group.id)
        centre = Vector2(100, 100)
        first = coord.ring_slot(agents[2], centre)
        again = coord.ring_slot(agents[2], centre)
        assert first == again
        slots = {coord.ring_slot(a, centre) for a in agents}
        assert len(slots) == 4
