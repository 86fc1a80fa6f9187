"""Spawn pattern selection.

On a difficulty-scaled cadence the selector picks one of four placement
patterns by weighted draw, generates positions around the player and
turns each into a ``SpawnRequest``.  Requests are only intentions; the
AI system fulfils or rejects them against the world.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from horde.core.enums import Domain, SpawnStatus
from horde.core.models import ZERO, Vector2

if TYPE_CHECKING:
    from horde.config import AIConfig
    from horde.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)

PATTERNS = ("scattered", "clustered", "ambush", "swarm")
MANUAL_PATTERN = "manual"

CLUSTER_SPREAD = 10.0
SWARM_SPREAD = (5.0, 20.0)
SWARM_CENTER_FACTOR = 0.8
AMBUSH_BASE = 40.0
AMBUSH_PER_DIFFICULTY = 20.0
AMBUSH_JITTER = 20.0
AMBUSH_CONE = math.pi / 4          # half-angle either side of the heading
TYPE_WEIGHT_FLOOR = 0.01
PATTERN_WEIGHT_FLOOR = 0.1
CONTEXT_BOOSTS = {("ambush", "fast"): 1.5, ("swarm", "common"): 1.3}


@dataclass(slots=True)
class SpawnRequest:
    id: int
    position: Vector2
    archetype: str
    pattern: str
    requested_at: float
    tier: str = ""
    priority: float = 0.5
    group_tag: str | None = None
    status: SpawnStatus = SpawnStatus.PENDING
    agent_id: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "position": [self.position.x, self.position.y],
            "archetype": self.archetype,
            "pattern": self.pattern,
            "tier": self.tier,
            "group_tag": self.group_tag,
            "status": self.status.name.lower(),
            "agent_id": self.agent_id,
            "requested_at": self.requested_at,
        }


class SpawnPatternSelector:
    """Decides when, where and what to spawn for the current difficulty."""

    def __init__(self, config: AIConfig, rng: DeterministicRNG) -> None:
        self._config = config
        self._rng = rng
        self._reset_streams()
        self._next_id = 1
        self._cycles = 0
        self._last_spawn = 0.0
        self._pending: list[SpawnRequest] = []
        self.requested = 0
        self.fulfilled = 0
        self.failed = 0
        self.by_type: Counter[str] = Counter()
        self.by_pattern: Counter[str] = Counter()

    def _reset_streams(self) -> None:
        self._pattern_rng = self._rng.stream(Domain.SPAWN_PATTERN)
        self._position_rng = self._rng.stream(Domain.SPAWN_POSITION)
        self._type_rng = self._rng.stream(Domain.SPAWN_TYPE)

    # -- weights --

    def pattern_weight(self, pattern: str, difficulty: float) -> float:
        base, scale = self._config.pattern_weights[pattern]
        return max(PATTERN_WEIGHT_FLOOR, base + scale * difficulty)

    def pattern_weights(self, difficulty: float) -> dict[str, float]:
        return {name: self.pattern_weight(name, difficulty) for name in PATTERNS}

    def type_weights(self, difficulty: float, context: str = "normal") -> dict[str, float]:
        weights = {}
        for tier, (base, scale) in self._config.type_weights.items():
            weight = (base + scale * difficulty) * CONTEXT_BOOSTS.get((context, tier), 1.0)
            weights[tier] = max(TYPE_WEIGHT_FLOOR, weight)
        return weights

    # -- draws --

    def select_pattern(self, difficulty: float) -> str:
        weights = self.pattern_weights(difficulty)
        return self._pattern_rng.weighted_choice(list(weights), list(weights.values()))

    def select_tier(self, difficulty: float, context: str = "normal") -> str:
        weights = self.type_weights(difficulty, context)
        return self._type_rng.weighted_choice(list(weights), list(weights.values()))

    def archetype_for(self, tier: str, context: str = "normal") -> str:
        mapping = self._config.tier_archetypes
        if context == "swarm" and tier == "common":
            return mapping.get("swarm", mapping[tier])
        return mapping[tier]

    def spawn_count(self, difficulty: float) -> int:
        return max(1, 2 + math.floor(difficulty * 2) + self._pattern_rng.randint(0, 2))

    # -- cadence --

    def spawn_interval(self, difficulty: float) -> float:
        return self._config.base_spawn_interval / max(0.5, difficulty)

    def agent_limit(self, difficulty: float) -> int:
        """Most agents allowed alive at *difficulty*: floor(max_agents * d), never above max_agents."""
        cap = self._config.max_agents
        return max(0, min(cap, math.floor(cap * difficulty)))

    def capacity(self, difficulty: float, active: int) -> int:
        return max(0, self.agent_limit(difficulty) - active)

    def should_spawn(self, now: float, difficulty: float, active: int) -> bool:
        if active >= self.agent_limit(difficulty):
            return False
        return now - self._last_spawn >= self.spawn_interval(difficulty)

    def update(
        self,
        now: float,
        difficulty: float,
        active: int,
        player_pos: Vector2 | None,
        player_vel: Vector2 | None,
    ) -> list[SpawnRequest]:
        """Run a spawn cycle when one is due; returns the new requests."""
        if not self.should_spawn(now, difficulty, active):
            return []
        if player_pos is None:
            # Try again next tick; the cadence only restarts on a real cycle.
            return []
        self._last_spawn = now
        return self.run_cycle(now, difficulty, active, player_pos, player_vel or ZERO)

    def run_cycle(
        self,
        now: float,
        difficulty: float,
        active: int,
        player_pos: Vector2,
        player_vel: Vector2,
    ) -> list[SpawnRequest]:
        count = min(self.spawn_count(difficulty), self.capacity(difficulty, active))
        if count <= 0:
            return []
        pattern = self.select_pattern(difficulty)
        self._cycles += 1

        if pattern == "clustered":
            spots, context, tag = self.clustered(player_pos, count), "normal", None
        elif pattern == "ambush" and player_vel.length() > self._config.motion_threshold:
            spots, context, tag = self.ambush(player_pos, player_vel, count, difficulty), "ambush", None
        elif pattern == "swarm":
            spots, context, tag = self.swarm(player_pos, count), "swarm", f"swarm-{self._cycles}"
        else:
            # A stationary player turns an ambush into a scatter.
            spots, context, tag = self.scattered(player_pos, count), "normal", None

        requests = []
        for pos in spots:
            tier = self.select_tier(difficulty, context)
            requests.append(self._create(pos, self.archetype_for(tier, context), pattern, now, tier, tag))
        self.by_pattern[pattern] += len(requests)
        logger.info(
            "Spawn cycle %d: %s x%d (difficulty %.2f)", self._cycles, pattern, len(requests), difficulty
        )
        return requests

    # -- placement --

    def _ring_point(self, center: Vector2, low: float, high: float) -> Vector2:
        angle = self._position_rng.uniform(0.0, 2 * math.pi)
        return center + Vector2.from_angle(angle, self._position_rng.uniform(low, high))

    def scattered(self, player_pos: Vector2, count: int) -> list[Vector2]:
        cfg = self._config
        return [self._ring_point(player_pos, cfg.min_spawn_radius, cfg.max_spawn_radius) for _ in range(count)]

    def clustered(self, player_pos: Vector2, count: int) -> list[Vector2]:
        cfg = self._config
        clusters = max(1, count // 3)
        per_cluster = math.ceil(count / clusters)
        spots: list[Vector2] = []
        for i in range(clusters):
            distance = self._position_rng.uniform(cfg.min_spawn_radius, cfg.max_spawn_radius)
            center = player_pos + Vector2.from_angle(2 * math.pi * i / clusters, distance)
            for _ in range(per_cluster):
                if len(spots) >= count:
                    break
                spots.append(self._ring_point(center, 0.0, CLUSTER_SPREAD))
        return spots

    def ambush(self, player_pos: Vector2, player_vel: Vector2, count: int, difficulty: float) -> list[Vector2]:
        heading = player_vel.angle()
        reach = AMBUSH_BASE + AMBUSH_PER_DIFFICULTY * difficulty
        spots = []
        for _ in range(count):
            angle = heading + self._position_rng.uniform(-AMBUSH_CONE, AMBUSH_CONE)
            distance = reach + self._position_rng.uniform(0.0, AMBUSH_JITTER)
            spots.append(player_pos + Vector2.from_angle(angle, distance))
        return spots

    def swarm(self, player_pos: Vector2, count: int) -> list[Vector2]:
        angle = self._position_rng.uniform(0.0, 2 * math.pi)
        center = player_pos + Vector2.from_angle(angle, self._config.max_spawn_radius * SWARM_CENTER_FACTOR)
        spots = []
        for i in range(count):
            slot = 2 * math.pi * i / count + self._position_rng.uniform(0.0, 0.5)
            spots.append(center + Vector2.from_angle(slot, self._position_rng.uniform(*SWARM_SPREAD)))
        return spots

    # -- requests --

    def _create(
        self,
        pos: Vector2,
        archetype: str,
        pattern: str,
        now: float,
        tier: str = "",
        tag: str | None = None,
        queue: bool = True,
    ) -> SpawnRequest:
        request = SpawnRequest(
            id=self._next_id,
            position=pos,
            archetype=archetype,
            pattern=pattern,
            requested_at=now,
            tier=tier,
            group_tag=tag,
        )
        self._next_id += 1
        self.requested += 1
        self.by_type[archetype] += 1
        if queue:
            self._pending.append(request)
        return request

    def request_spawn(self, position: Vector2, archetype: str, now: float, queue: bool = True) -> SpawnRequest:
        """Create a manual spawn request; the archetype is validated on fulfilment.

        With ``queue=False`` the caller fulfils the request itself.
        """
        self.by_pattern[MANUAL_PATTERN] += 1
        return self._create(position, archetype, MANUAL_PATTERN, now, tier=archetype, queue=queue)

    def take_pending(self) -> list[SpawnRequest]:
        pending, self._pending = self._pending, []
        return pending

    def mark_fulfilled(self, request: SpawnRequest, agent_id: int) -> None:
        request.status = SpawnStatus.FULFILLED
        request.agent_id = agent_id
        self.fulfilled += 1

    def mark_failed(self, request: SpawnRequest, reason: str) -> None:
        request.status = SpawnStatus.FAILED
        self.failed += 1
        logger.warning("Spawn request %d (%s) rejected: %s", request.id, request.archetype, reason)

    # -- statistics --

    @property
    def efficiency(self) -> float:
        resolved = self.fulfilled + self.failed
        return self.fulfilled / resolved if resolved else 0.0

    def statistics(self) -> dict:
        total = sum(self.by_pattern.values())
        return {
            "total_requested": self.requested,
            "fulfilled": self.fulfilled,
            "failed": self.failed,
            "pending": len(self._pending),
            "spawn_efficiency": self.efficiency,
            "spawns_by_type": dict(self.by_type),
            "spawns_by_pattern": dict(self.by_pattern),
            "pattern_distribution": {k: v / total for k, v in self.by_pattern.items()} if total else {},
        }

    def reset(self) -> None:
        self._reset_streams()
        self._next_id = 1
        self._cycles = 0
        self._last_spawn = 0.0
        self._pending.clear()
        self.requested = self.fulfilled = self.failed = 0
        self.by_type.clear()
        self.by_pattern.clear()
