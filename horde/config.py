"""AI system configuration with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass, field


def _default_pattern_weights() -> dict[str, tuple[float, float]]:
    # pattern -> (base weight, weight gained per unit of difficulty)
    return {
        "scattered": (0.4, -0.1),
        "clustered": (0.3, 0.1),
        "ambush": (0.2, 0.15),
        "swarm": (0.1, 0.2),
    }


def _default_type_weights() -> dict[str, tuple[float, float]]:
    # spawn tier -> (base weight, weight gained per unit of difficulty)
    return {
        "common": (0.7, -0.1),
        "fast": (0.2, 0.05),
        "heavy": (0.08, 0.03),
        "rare": (0.02, 0.02),
    }


def _default_tier_archetypes() -> dict[str, str]:
    return {
        "common": "basic",
        "fast": "runner",
        "heavy": "brute",
        "rare": "spitter",
        "swarm": "swarm",
    }


@dataclass(frozen=True)
class AIConfig:
    """Immutable configuration for one AI system instance."""

    # World
    seed: int = 42
    grid_width: int = 160
    grid_height: int = 160
    cell_size: float = 5.0                 # World units per occupancy-grid cell

    # Timing (seconds)
    tick_rate: float = 0.05                # Wall-clock seconds between ticks when served
    decision_interval: float = 0.1         # Behavior-tree passes per agent are at most 10 Hz
    pathfinding_interval: float = 0.5
    lod_interval: float = 1.0
    snapshot_interval: float = 1.0         # Performance snapshot cadence

    # Agents
    max_agents: int = 50
    despawn_distance: float = 600.0
    lod_distances: tuple[float, float, float] = (100.0, 200.0, 400.0)
    idle_dwell: float = 2.0
    stun_duration: float = 2.0
    alert_decay_rate: float = 0.1          # Alert lost per second without sight of the target
    stat_difficulty_scale: float = 0.25    # Health/damage gain per unit of difficulty above 1.0

    # Pathfinding
    path_max_nodes: int = 4000
    allow_diagonal: bool = True
    avoid_corner_squeeze: bool = False     # Forbid diagonal hops between two blocked orthogonal cells
    waypoint_radius: float = 10.0
    arrival_radius: float = 5.0

    # Difficulty
    initial_difficulty: float = 1.0
    min_difficulty: float = 0.5
    max_difficulty: float = 3.0
    evaluation_interval: float = 5.0
    adjustment_rate: float = 0.1
    # Performance bucket floors: excellent, good, average, poor
    performance_thresholds: tuple[float, float, float, float] = (0.8, 0.6, 0.4, 0.2)
    # Target multipliers: excellent, good, average, poor, very poor
    performance_multipliers: tuple[float, float, float, float, float] = (1.2, 1.1, 1.0, 0.9, 0.8)
    difficulty_history_size: int = 100

    # Performance tracking
    performance_history_size: int = 300
    speed_window: int = 60
    stuck_speed: float = 1.0
    stuck_grace: float = 3.0

    # Spawning
    base_spawn_interval: float = 2.0
    min_spawn_radius: float = 30.0
    max_spawn_radius: float = 100.0
    motion_threshold: float = 1.0          # Player speed above which ambushes lead the player
    pattern_weights: dict[str, tuple[float, float]] = field(default_factory=_default_pattern_weights)
    type_weights: dict[str, tuple[float, float]] = field(default_factory=_default_type_weights)
    tier_archetypes: dict[str, str] = field(default_factory=_default_tier_archetypes)

    # Groups / flocking
    group_radius: float = 50.0
    min_separation: float = 30.0
    cohesion_weight: float = 0.8
    separation_weight: float = 0.6
    alignment_weight: float = 0.7
    ring_radius: float = 80.0
    form_group_min: int = 3
    form_group_radius: float = 100.0

    # Logging
    log_level: str = "INFO"
    replay_file: str = "replay.json"
    event_log_size: int = 5000

    def __post_init__(self) -> None:
        if self.min_difficulty <= 0 or self.min_difficulty > self.max_difficulty:
            raise ValueError(
                f"invalid difficulty bounds [{self.min_difficulty}, {self.max_difficulty}]"
            )
        if not self.min_difficulty <= self.initial_difficulty <= self.max_difficulty:
            raise ValueError(f"initial_difficulty {self.initial_difficulty} outside bounds")
        if not 0.0 < self.adjustment_rate <= 1.0:
            raise ValueError(f"adjustment_rate must be in (0, 1], got {self.adjustment_rate}")
        if self.min_spawn_radius < 0 or self.min_spawn_radius > self.max_spawn_radius:
            raise ValueError("min_spawn_radius must be within [0, max_spawn_radius]")
        if list(self.performance_thresholds) != sorted(self.performance_thresholds, reverse=True):
            raise ValueError("performance_thresholds must be descending")
        if self.max_agents < 0:
            raise ValueError("max_agents must be non-negative")
        if any(v <= 0 for v in (self.decision_interval, self.pathfinding_interval,
                                self.lod_interval, self.evaluation_interval,
                                self.base_spawn_interval, self.cell_size)):
            raise ValueError("intervals and cell_size must be positive")
        unknown = set(self.type_weights) - set(self.tier_archetypes)
        if unknown:
            raise ValueError(f"spawn tiers without an archetype mapping: {sorted(unknown)}")
