"""Core data models: Vector2, Agent."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from typing import Any

from horde.core.enums import AgentState, LODTier


@dataclass(frozen=True, slots=True)
class Vector2:
    """Immutable 2D ground-plane vector."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vector2:
        return Vector2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vector2:
        return Vector2(self.x / scalar, self.y / scalar)

    def __neg__(self) -> Vector2:
        return Vector2(-self.x, -self.y)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def distance(self, other: Vector2) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def normalized(self) -> Vector2:
        """Unit vector in the same direction; the zero vector stays zero."""
        length = self.length()
        if length == 0.0:
            return Vector2()
        return Vector2(self.x / length, self.y / length)

    def angle(self) -> float:
        return math.atan2(self.y, self.x)

    @staticmethod
    def from_angle(angle: float, length: float = 1.0) -> Vector2:
        return Vector2(math.cos(angle) * length, math.sin(angle) * length)

    def __repr__(self) -> str:
        return f"({self.x:.1f}, {self.y:.1f})"


ZERO = Vector2()


@dataclass(slots=True)
class Agent:
    """Mutable AI state for one hostile agent.

    The behavior tree itself is shared per archetype; everything an agent
    remembers between passes lives here, mostly in ``blackboard``.
    """

    id: int
    archetype: str
    pos: Vector2
    health: float
    max_health: float
    damage: float
    speed: float
    velocity: Vector2 = ZERO
    state: AgentState = AgentState.IDLE
    state_time: float = 0.0            # Seconds spent in the current state
    cursor: str = "root"               # Leaf left RUNNING by the last pass, else root
    blackboard: dict[str, Any] = field(default_factory=dict)

    # Perception / targeting
    target_id: int | None = None       # Opaque id, resolved through a lookup
    awareness: float = 0.5
    alert: float = 0.0

    # Countdowns (seconds)
    ability_cooldowns: dict[str, float] = field(default_factory=dict)
    attack_cooldown: float = 0.0
    stun_remaining: float = 0.0

    # Coordination
    group_id: int | None = None

    # Movement
    path: list[Vector2] = field(default_factory=list)
    path_index: int = 0
    move_goal: Vector2 | None = None
    speed_multiplier: float = 1.0
    steering: Vector2 = ZERO

    # Level of detail and cadence timestamps
    lod: LODTier = LODTier.FULL
    last_decision_at: float = float("-inf")
    last_path_at: float = float("-inf")
    last_lod_at: float = float("-inf")

    @property
    def alive(self) -> bool:
        return self.state != AgentState.DYING

    @property
    def health_fraction(self) -> float:
        if self.max_health <= 0:
            return 0.0
        return max(0.0, self.health / self.max_health)

    def set_state(self, state: AgentState) -> None:
        if state != self.state:
            self.state = state
            self.state_time = 0.0

    def ability_ready(self, name: str) -> bool:
        return self.ability_cooldowns.get(name, 0.0) <= 0.0

    def clear_path(self) -> None:
        self.path = []
        self.path_index = 0

    def copy(self) -> Agent:
        """Deep copy for snapshotting."""
        return copy.deepcopy(self)
