"""Outbound events emitted by the AI system.

The core never applies damage to the player or plays effects itself; it
emits these records and the embedding game reacts to them.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from horde.core.models import Vector2


@dataclass(frozen=True, slots=True)
class AIEvent:
    tick: int

    @property
    def category(self) -> str:
        return "event"

    def message(self) -> str:
        return self.category

    def to_dict(self) -> dict:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, dict) and set(value) == {"x", "y"}:
                data[key] = [value["x"], value["y"]]
        data["category"] = self.category
        return data


@dataclass(frozen=True, slots=True)
class AgentSpawned(AIEvent):
    agent_id: int
    agent_type: str
    position: Vector2
    pattern: str = ""

    @property
    def category(self) -> str:
        return "agent_spawned"

    def message(self) -> str:
        return f"{self.agent_type} #{self.agent_id} spawned at {self.position} ({self.pattern})"


@dataclass(frozen=True, slots=True)
class AgentAttack(AIEvent):
    agent_id: int
    position: Vector2
    target_position: Vector2
    damage: float
    ability_name: str = "attack"

    @property
    def category(self) -> str:
        return "agent_attack"

    def message(self) -> str:
        return f"#{self.agent_id} {self.ability_name} for {self.damage:.0f}"


@dataclass(frozen=True, slots=True)
class AgentRemoved(AIEvent):
    agent_id: int
    reason: str

    @property
    def category(self) -> str:
        return "agent_removed"

    def message(self) -> str:
        return f"#{self.agent_id} removed ({self.reason})"


@dataclass(frozen=True, slots=True)
class CombatEffect(AIEvent):
    effect_type: str
    position: Vector2
    intensity: float = 1.0

    @property
    def category(self) -> str:
        return "combat_effect"

    def message(self) -> str:
        return f"{self.effect_type} at {self.position}"


@dataclass(frozen=True, slots=True)
class DifficultyChanged(AIEvent):
    level: float
    reason: str

    @property
    def category(self) -> str:
        return "difficulty_changed"

    def message(self) -> str:
        return f"difficulty {self.level:.2f}: {self.reason}"
