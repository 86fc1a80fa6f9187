"""Immutable snapshot of the AI system for readers on other threads."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from horde.core.models import Agent, Vector2
    from horde.difficulty.controller import DifficultyRecord
    from horde.engine.system import AISystem


@dataclass(frozen=True, slots=True)
class GroupView:
    id: int
    leader_id: int | None
    members: tuple[int, ...]
    target_id: int | None
    tag: str | None


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Read-only view of one AI system tick.

    Agents are deep copies behind a MappingProxyType, so holding a
    snapshot never races the tick thread.
    """

    tick: int
    time: float
    seed: int
    difficulty: float
    difficulty_overridden: bool
    performance: float
    player_pos: Vector2 | None
    agents: Mapping[int, Agent]
    groups: tuple[GroupView, ...]
    spawn_stats: Mapping[str, Any]
    difficulty_history: tuple[DifficultyRecord, ...]
    performance_breakdown: Mapping[str, float]
    performance_metrics: Mapping[str, float]

    @classmethod
    def from_system(cls, system: AISystem) -> Snapshot:
        copied = {aid: a.copy() for aid, a in system.agents.items()}
        groups = tuple(
            GroupView(g.id, g.leader_id, tuple(g.members), g.target_id, g.tag)
            for g in system.groups.groups.values()
        )
        return cls(
            tick=system.tick,
            time=system.time,
            seed=system.config.seed,
            difficulty=system.difficulty.level,
            difficulty_overridden=system.difficulty.overridden,
            performance=system.tracker.score,
            player_pos=system.world.get_player_position(),
            agents=MappingProxyType(copied),
            groups=groups,
            spawn_stats=MappingProxyType(system.spawner.statistics()),
            difficulty_history=tuple(system.difficulty.history),
            performance_breakdown=MappingProxyType(system.tracker.breakdown()),
            performance_metrics=MappingProxyType(system.tracker.metrics.to_dict()),
        )

    def state_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for agent in self.agents.values():
            name = agent.state.name.lower()
            counts[name] = counts.get(name, 0) + 1
        return counts
