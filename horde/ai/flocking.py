"""Group coordination: membership, leaders, boids steering and ring formation.

Groups are owned by one ``GroupCoordinator`` per AI system.  An agent is
in at most one group; adding it to another group moves it.  A group's
leader is always a current member: when the leader leaves, the first
remaining member takes over, and an empty group is deleted.

Steering follows the classic boids rules:
  cohesion  : pull toward the centroid of nearby group members
  separation: push away from members closer than the minimum spacing
  alignment : match the average velocity of nearby members
The weighted sum shifts the agent's movement goal rather than its
velocity, so flocking bends a route instead of replacing it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Mapping

from horde.core.models import Vector2, ZERO

if TYPE_CHECKING:
    from horde.config import AIConfig
    from horde.core.models import Agent

logger = logging.getLogger(__name__)

# Raw boids vectors are scaled by these gains before the per-group weights.
COHESION_GAIN = 0.01
SEPARATION_GAIN = 0.05
ALIGNMENT_GAIN = 0.02


@dataclass(slots=True)
class Group:
    """A set of agents sharing flocking forces and, optionally, a target."""

    id: int
    members: list[int] = field(default_factory=list)   # Join order; leader is re-elected from the front
    leader_id: int | None = None
    cohesion_weight: float = 0.8
    separation_weight: float = 0.6
    alignment_weight: float = 0.7
    target_id: int | None = None
    tag: str | None = None
    ring_slots: dict[int, float] = field(default_factory=dict)  # member id -> angle (radians)

    @property
    def size(self) -> int:
        return len(self.members)


# ---------------------------------------------------------------------------
# Boids rules
# ---------------------------------------------------------------------------

def cohesion(agent: Agent, neighbours: Iterable[Agent]) -> Vector2:
    """Vector from the agent to the centroid of *neighbours* (zero if none)."""
    points = [n.pos for n in neighbours]
    if not points:
        return ZERO
    cx = sum(p.x for p in points) / len(points)
    cy = sum(p.y for p in points) / len(points)
    return Vector2(cx - agent.pos.x, cy - agent.pos.y)


def separation(agent: Agent, neighbours: Iterable[Agent], min_spacing: float) -> Vector2:
    """Sum of unit vectors pointing away from neighbours closer than *min_spacing*."""
    sx = sy = 0.0
    for n in neighbours:
        d = agent.pos.distance(n.pos)
        if 0.0 < d < min_spacing:
            sx += (agent.pos.x - n.pos.x) / d
            sy += (agent.pos.y - n.pos.y) / d
    return Vector2(sx, sy)


def alignment(agent: Agent, neighbours: Iterable[Agent]) -> Vector2:
    """Difference between the neighbours' average velocity and the agent's own."""
    vels = [n.velocity for n in neighbours]
    if not vels:
        return ZERO
    ax = sum(v.x for v in vels) / len(vels)
    ay = sum(v.y for v in vels) / len(vels)
    return Vector2(ax - agent.velocity.x, ay - agent.velocity.y)


def ring_positions(center: Vector2, count: int, radius: float, start_angle: float = 0.0) -> list[Vector2]:
    """*count* points evenly spaced (2*pi/count apart) on a circle around *center*."""
    if count <= 0:
        return []
    step = 2.0 * math.pi / count
    return [center + Vector2.from_angle(start_angle + step * i, radius) for i in range(count)]


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------

class GroupCoordinator:
    """Owns every group of one AI system and keeps membership consistent."""

    def __init__(self, config: AIConfig) -> None:
        self._config = config
        self.groups: dict[int, Group] = {}
        self._tags: dict[str, int] = {}
        self._next_id = 1

    def get(self, group_id: int | None) -> Group | None:
        if group_id is None:
            return None
        return self.groups.get(group_id)

    def group_for_tag(self, tag: str) -> Group | None:
        return self.get(self._tags.get(tag))

    def create(self, founder: Agent, tag: str | None = None) -> Group:
        cfg = self._config
        group = Group(
            id=self._next_id,
            cohesion_weight=cfg.cohesion_weight,
            separation_weight=cfg.separation_weight,
            alignment_weight=cfg.alignment_weight,
            tag=tag,
        )
        self._next_id += 1
        self.groups[group.id] = group
        if tag is not None:
            self._tags[tag] = group.id
        self.add(founder, group.id)
        logger.debug("Group %d formed by agent #%d (tag=%s)", group.id, founder.id, tag)
        return group

    def join_tag(self, agent: Agent, tag: str) -> Group:
        """Put *agent* in the group for a spawn tag, creating it if needed."""
        group = self.group_for_tag(tag)
        if group is None:
            return self.create(agent, tag=tag)
        self.add(agent, group.id)
        return group

    def add(self, agent: Agent, group_id: int) -> None:
        group = self.groups[group_id]
        if agent.group_id == group_id:
            return
        if agent.group_id is not None:
            self.remove(agent)
        group.members.append(agent.id)
        agent.group_id = group_id
        if group.leader_id is None:
            group.leader_id = agent.id
        group.ring_slots.clear()

    def remove(self, agent: Agent) -> None:
        """Detach *agent* from its group, re-electing or dissolving as needed."""
        group = self.get(agent.group_id)
        agent.group_id = None
        if group is None:
            return
        if agent.id in group.members:
            group.members.remove(agent.id)
        group.ring_slots.clear()
        if not group.members:
            self._dissolve(group)
            return
        if group.leader_id == agent.id:
            group.leader_id = group.members[0]
            logger.debug("Group %d re-elected leader #%d", group.id, group.leader_id)

    def _dissolve(self, group: Group) -> None:
        del self.groups[group.id]
        if group.tag is not None and self._tags.get(group.tag) == group.id:
            del self._tags[group.tag]
        logger.debug("Group %d dissolved", group.id)

    def is_leader(self, agent: Agent) -> bool:
        group = self.get(agent.group_id)
        return group is not None and group.leader_id == agent.id

    def leader_of(self, agent: Agent) -> int | None:
        """Leader id of the agent's group when that leader is someone else."""
        group = self.get(agent.group_id)
        if group is None or group.leader_id == agent.id:
            return None
        return group.leader_id

    def neighbours(self, agent: Agent, agents: Mapping[int, Agent]) -> list[Agent]:
        """Living members of the agent's group within ``group_radius``."""
        group = self.get(agent.group_id)
        if group is None:
            return []
        radius = self._config.group_radius
        found = []
        for mid in group.members:
            if mid == agent.id:
                continue
            other = agents.get(mid)
            if other is not None and other.alive and agent.pos.distance(other.pos) <= radius:
                found.append(other)
        return found

    def steering(self, agent: Agent, agents: Mapping[int, Agent]) -> Vector2:
        """Weighted cohesion + separation + alignment offset for *agent*."""
        group = self.get(agent.group_id)
        if group is None:
            return ZERO
        near = self.neighbours(agent, agents)
        if not near:
            return ZERO
        coh = cohesion(agent, near) * (COHESION_GAIN * group.cohesion_weight)
        sep = separation(agent, near, self._config.min_separation) * (SEPARATION_GAIN * group.separation_weight)
        ali = alignment(agent, near) * (ALIGNMENT_GAIN * group.alignment_weight)
        return coh + sep + ali

    def assign_ring(self, group: Group, center: Vector2, radius: float | None = None) -> dict[int, Vector2]:
        """Assign every member an evenly spaced slot on a ring around *center*.

        Returns member id -> world position; slot angles are kept on the
        group so later passes by other members reuse the same layout.
        """
        r = self._config.ring_radius if radius is None else radius
        count = len(group.members)
        step = 2.0 * math.pi / count if count else 0.0
        group.ring_slots = {mid: step * i for i, mid in enumerate(group.members)}
        return dict(zip(group.members, ring_positions(center, count, r)))

    def ring_slot(self, agent: Agent, center: Vector2, radius: float | None = None) -> Vector2 | None:
        group = self.get(agent.group_id)
        if group is None:
            return None
        if agent.id not in group.ring_slots:
            self.assign_ring(group, center, radius)
        r = self._config.ring_radius if radius is None else radius
        return center + Vector2.from_angle(group.ring_slots[agent.id], r)

    def clear(self) -> None:
        self.groups.clear()
        self._tags.clear()
