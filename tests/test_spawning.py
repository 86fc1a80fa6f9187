"""Tests for spawn pattern selection, placement and request bookkeeping."""

import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from horde.config import AIConfig
from horde.core.enums import SpawnStatus
from horde.core.models import Vector2
from horde.difficulty.spawning import MANUAL_PATTERN, PATTERNS, SpawnPatternSelector
from horde.systems.rng import DeterministicRNG

PLAYER = Vector2(10.0, -20.0)


def _make_selector(seed: int = 42, **overrides) -> SpawnPatternSelector:
    return SpawnPatternSelector(AIConfig(seed=seed, **overrides), DeterministicRNG(seed))


class TestWeights:
    def test_aggressive_patterns_grow_with_difficulty(self):
        sel = _make_selector()
        low, high = sel.pattern_weights(0.5), sel.pattern_weights(3.0)
        assert high["swarm"] > low["swarm"]
        assert high["ambush"] > low["ambush"]
        assert high["scattered"] < low["scattered"]

    def test_weights_never_drop_below_floor(self):
        sel = _make_selector()
        for d in (0.5, 1.0, 3.0, 10.0):
            assert all(w >= 0.1 for w in sel.pattern_weights(d).values())
            assert all(w >= 0.01 for w in sel.type_weights(d).values())

    def test_rare_types_grow_with_difficulty(self):
        sel = _make_selector()
        assert sel.type_weights(3.0)["rare"] > sel.type_weights(0.5)["rare"]
        assert sel.type_weights(3.0)["common"] < sel.type_weights(0.5)["common"]

    def test_context_boosts(self):
        sel = _make_selector()
        normal = sel.type_weights(1.0)
        assert sel.type_weights(1.0, "ambush")["fast"] == pytest.approx(normal["fast"] * 1.5)
        assert sel.type_weights(1.0, "swarm")["common"] == pytest.approx(normal["common"] * 1.3)

    def test_swarm_context_maps_common_to_swarm_archetype(self):
        sel = _make_selector()
        assert sel.archetype_for("common", "swarm") == "swarm"
        assert sel.archetype_for("common") == "basic"
        assert sel.archetype_for("heavy", "swarm") == "brute"


class TestCadence:
    def test_interval_shrinks_with_difficulty(self):
        sel = _make_selector()
        assert sel.spawn_interval(2.0) < sel.spawn_interval(1.0)
        assert sel.spawn_interval(0.1) == sel.spawn_interval(0.5)

    def test_capacity_scales_with_difficulty(self):
        sel = _make_selector(max_agents=50)
        assert sel.capacity(0.5, 0) == 25
        assert sel.capacity(0.5, 30) == 0
        assert sel.capacity(3.0, 10) == 40

    def test_agent_limit_rounds_down(self):
        sel = _make_selector(max_agents=100)
        assert sel.agent_limit(0.505) == 50
        assert sel.capacity(0.505, 0) == 50
        assert sel.capacity(0.505, 50) == 0
        assert not sel.should_spawn(100.0, 0.505, 50)

    def test_agent_limit_never_exceeds_max_agents(self):
        sel = _make_selector(max_agents=5)
        assert sel.agent_limit(3.0) == 5
        assert sel.agent_limit(0.5) == 2

    def test_no_spawn_at_capacity(self):
        sel = _make_selector(max_agents=10)
        assert not sel.should_spawn(100.0, 1.0, 10)
        assert sel.update(100.0, 1.0, 10, PLAYER, Vector2()) == []

    def test_no_player_skips_without_restarting_timer(self):
        sel = _make_selector()
        assert sel.update(2.0, 1.0, 0, None, None) == []
        requests = sel.update(2.05, 1.0, 0, PLAYER, Vector2())
        assert requests

    def test_cycle_respects_interval(self):
        sel = _make_selector()
        assert sel.update(1.0, 1.0, 0, PLAYER, Vector2()) == []
        assert sel.update(2.0, 1.0, 0, PLAYER, Vector2())
        assert sel.update(3.0, 1.0, 0, PLAYER, Vector2()) == []

    def test_cycle_never_exceeds_capacity(self):
        sel = _make_selector(max_agents=10)
        requests = sel.update(2.0, 1.0, 8, PLAYER, Vector2())
        assert 0 < len(requests) <= 2


class TestPlacement:
    def test_scattered_within_radii(self):
        sel = _make_selector()
        for pos in sel.scattered(PLAYER, 50):
            assert 30.0 - 1e-9 <= pos.distance(PLAYER) <= 100.0 + 1e-9

    def test_clustered_points_are_tight(self):
        sel = _make_selector()
        spots = sel.clustered(PLAYER, 3)
        assert len(spots) == 3
        for a in spots:
            for b in spots:
                assert a.distance(b) <= 20.0 + 1e-9

    def test_ambush_ahead_of_heading(self):
        sel = _make_selector()
        velocity = Vector2(0.0, 15.0)
        for pos in sel.ambush(PLAYER, velocity, 20, 1.0):
            offset = pos - PLAYER
            assert offset.y > 0
            assert abs(offset.x) <= offset.y + 1e-9
            assert 60.0 <= offset.length() <= 80.0 + 1e-9

    def test_swarm_packed_around_one_centre(self):
        sel = _make_selector()
        spots = sel.swarm(PLAYER, 6)
        for pos in spots:
            assert 80.0 - 20.0 - 1e-9 <= pos.distance(PLAYER) <= 80.0 + 20.0 + 1e-9

    def test_stationary_ambush_falls_back_to_scatter(self):
        sel = _make_selector()
        sel.select_pattern = lambda difficulty: "ambush"
        requests = sel.run_cycle(2.0, 1.0, 0, PLAYER, Vector2())
        assert requests
        for r in requests:
            assert 30.0 - 1e-9 <= r.position.distance(PLAYER) <= 100.0 + 1e-9

    def test_swarm_cycle_shares_group_tag(self):
        sel = _make_selector()
        sel.select_pattern = lambda difficulty: "swarm"
        requests = sel.run_cycle(2.0, 1.0, 0, PLAYER, Vector2())
        assert requests
        assert {r.group_tag for r in requests} == {"swarm-1"}
        assert all(r.pattern == "swarm" for r in requests)

    def test_same_seed_same_spawns(self):
        a, b = _make_selector(seed=9), _make_selector(seed=9)
        ra = a.update(2.0, 1.5, 0, PLAYER, Vector2(5.0, 0.0))
        rb = b.update(2.0, 1.5, 0, PLAYER, Vector2(5.0, 0.0))
        assert [(r.position, r.archetype, r.pattern) for r in ra] == [(r.position, r.archetype, r.pattern) for r in rb]

    def test_pattern_draws_cover_every_pattern(self):
        sel = _make_selector()
        seen = {sel.select_pattern(2.0) for _ in range(400)}
        assert seen == set(PATTERNS)


class TestRequests:
    def test_manual_request_is_queued(self):
        sel = _make_selector()
        request = sel.request_spawn(Vector2(1, 1), "brute", 0.0)
        assert request.pattern == MANUAL_PATTERN
        assert request.status == SpawnStatus.PENDING
        assert sel.take_pending() == [request]
        assert sel.take_pending() == []

    def test_unqueued_request_is_not_pending(self):
        sel = _make_selector()
        sel.request_spawn(Vector2(1, 1), "brute", 0.0, queue=False)
        assert sel.take_pending() == []
        assert sel.requested == 1

    def test_statistics_and_efficiency(self):
        sel = _make_selector()
        assert sel.statistics()["spawn_efficiency"] == 0.0
        r1 = sel.request_spawn(Vector2(), "basic", 0.0)
        r2 = sel.request_spawn(Vector2(), "basic", 0.0)
        r3 = sel.request_spawn(Vector2(), "basic", 0.0)
        sel.take_pending()
        sel.mark_fulfilled(r1, 1)
        sel.mark_fulfilled(r2, 2)
        sel.mark_failed(r3, "blocked")
        stats = sel.statistics()
        assert stats["total_requested"] == 3
        assert stats["fulfilled"] == 2
        assert stats["failed"] == 1
        assert stats["spawn_efficiency"] == pytest.approx(2 / 3)
        assert stats["spawns_by_type"] == {"basic": 3}
        assert stats["pattern_distribution"] == {MANUAL_PATTERN: 1.0}
        assert r1.status == SpawnStatus.FULFILLED and r1.agent_id == 1
        assert r3.status == SpawnStatus.FAILED

    def test_reset_clears_counters(self):
        sel = _make_selector()
        sel.update(2.0, 1.0, 0, PLAYER, Vector2())
        sel.reset()
        stats = sel.statistics()
        assert stats["total_requested"] == 0
        assert stats["pending"] == 0
        assert sel.update(1.0, 1.0, 0, PLAYER, Vector2()) == []
