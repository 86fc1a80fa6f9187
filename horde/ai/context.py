"""Per-agent evaluation context handed to conditions and actions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Mapping

from horde.core.models import Vector2

if TYPE_CHECKING:
    from horde.ai.flocking import GroupCoordinator
    from horde.config import AIConfig
    from horde.core.archetypes import ArchetypeDef
    from horde.core.models import Agent
    from horde.core.world import Target, WorldQuery
    from horde.engine.events import AIEvent
    from horde.systems.rng import RandomStream
    from horde.systems.spatial_hash import SpatialHash


@dataclass(slots=True)
class AIContext:
    """Everything a handler may read or act on for one agent pass.

    Handlers mutate only ``agent`` (and group membership through
    ``groups``); outward effects go through ``emit``.
    """

    agent: Agent
    archetype: ArchetypeDef
    world: WorldQuery
    agents: Mapping[int, Agent]
    spatial: SpatialHash
    groups: GroupCoordinator
    rng: RandomStream
    config: AIConfig
    now: float
    tick: int
    emit: Callable[[AIEvent], None]

    # -- target resolution --

    def target(self) -> Target | None:
        """The agent's current target, or None when it has none or it vanished."""
        if self.agent.target_id is None:
            return None
        return self.world.get_target(self.agent.target_id)

    def target_position(self) -> Vector2 | None:
        """Live target position, falling back to the last known one."""
        target = self.target()
        if target is not None:
            return target.pos
        return self.agent.blackboard.get("last_known_target")

    def target_distance(self) -> float | None:
        target = self.target()
        if target is None:
            return None
        return self.agent.pos.distance(target.pos)

    # -- neighbourhood --

    def nearby_agents(self, radius: float, ungrouped_only: bool = False) -> list[Agent]:
        """Living agents other than this one within *radius*, ordered by id."""
        me = self.agent
        found: list[Agent] = []
        for other_id in self.spatial.query_radius(me.pos, radius, exclude=me.id):
            other = self.agents.get(other_id)
            if other is None or not other.alive:
                continue
            if ungrouped_only and other.group_id is not None:
                continue
            found.append(other)
        return found

    # -- movement intent --

    def move_to(self, goal: Vector2, speed_multiplier: float = 1.0) -> None:
        """Set a movement goal; the path is refreshed on the slow cadence.

        Starting to move from rest requests a path on the next update; a
        goal that merely shifts keeps following the stale path until the
        pathfinding interval elapses.
        """
        agent = self.agent
        if agent.move_goal is None:
            agent.clear_path()
            agent.last_path_at = float("-inf")
        agent.move_goal = goal
        agent.speed_multiplier = speed_multiplier

    def stop(self) -> None:
        self.agent.move_goal = None
        self.agent.clear_path()
        self.agent.speed_multiplier = 1.0
