"""Agent archetypes: stat templates, ability lists and tree references.

Archetypes are pydantic dataclasses so a malformed stat block fails at
import time instead of mid-simulation.  Stats are scaled by the live
difficulty scalar when an agent is spawned (see ``scaled_stats``).

Key types:
  ArchetypeDef     : immutable blueprint for one agent type
  ARCHETYPES       : registry keyed by archetype name
  ABILITY_COOLDOWNS: seconds between uses of each named ability
"""

from __future__ import annotations

from pydantic.dataclasses import dataclass as pydantic_dataclass


# ---------------------------------------------------------------------------
# Archetype definition
# ---------------------------------------------------------------------------

@pydantic_dataclass(frozen=True)
class ArchetypeDef:
    """Immutable blueprint describing one hostile agent type."""

    name: str
    tree: str                        # Behavior tree name in horde.ai.trees
    health: float
    speed: float                     # World units per second
    damage: float
    detection_range: float
    attack_range: float
    intelligence: int                # 1..6; scales sensing and tree sophistication
    attack_cooldown: float = 1.0
    give_up_multiplier: float = 2.0  # Give-up radius = detection radius * this
    abilities: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.give_up_multiplier <= 1.0:
            raise ValueError(
                f"{self.name}: give_up_multiplier must exceed 1.0 to leave a hysteresis band"
            )
        if self.health <= 0 or self.speed <= 0:
            raise ValueError(f"{self.name}: health and speed must be positive")
        if not 1 <= self.intelligence <= 6:
            raise ValueError(f"{self.name}: intelligence must be in [1, 6]")

    @property
    def intelligence_factor(self) -> float:
        """Sensing multiplier: 1.0 at intelligence 1, +10% per level above."""
        return 1.0 + 0.1 * (self.intelligence - 1)


ARCHETYPES: dict[str, ArchetypeDef] = {
    a.name: a
    for a in (
        ArchetypeDef(
            name="basic", tree="basic", health=100, speed=25, damage=20,
            detection_range=80, attack_range=25, intelligence=1,
            abilities=("bite", "grab"),
        ),
        ArchetypeDef(
            name="runner", tree="runner", health=80, speed=45, damage=15,
            detection_range=120, attack_range=30, intelligence=3,
            give_up_multiplier=2.4, abilities=("sprint", "leap_attack"),
        ),
        ArchetypeDef(
            name="brute", tree="brute", health=300, speed=15, damage=50,
            detection_range=60, attack_range=40, intelligence=2, attack_cooldown=1.5,
            abilities=("charge_attack", "ground_slam", "intimidate"),
        ),
        ArchetypeDef(
            name="spitter", tree="spitter", health=120, speed=20, damage=30,
            detection_range=150, attack_range=100, intelligence=4,
            give_up_multiplier=2.4, abilities=("acid_spit", "retreat", "climb"),
        ),
        ArchetypeDef(
            name="swarm", tree="swarm", health=60, speed=30, damage=12,
            detection_range=100, attack_range=20, intelligence=5, attack_cooldown=0.8,
            abilities=("call_horde",),
        ),
        ArchetypeDef(
            name="boss", tree="brute", health=800, speed=35, damage=80,
            detection_range=200, attack_range=60, intelligence=6, attack_cooldown=1.2,
            give_up_multiplier=2.5,
            abilities=("charge_attack", "ground_slam", "rampage", "summon_horde"),
        ),
    )
}


# Seconds between uses; abilities not listed fall back to DEFAULT_ABILITY_COOLDOWN.
ABILITY_COOLDOWNS: dict[str, float] = {
    "sprint": 5.0,
    "acid_spit": 3.0,
    "charge_attack": 6.0,
    "ground_slam": 8.0,
    "leap_attack": 6.0,
    "call_horde": 15.0,
    "rampage": 25.0,
    "summon_horde": 30.0,
    "intimidate": 10.0,
}

DEFAULT_ABILITY_COOLDOWN = 5.0


def get_archetype(name: str) -> ArchetypeDef:
    """Look up an archetype; raises KeyError for unknown names."""
    try:
        return ARCHETYPES[name]
    except KeyError:
        raise KeyError(f"unknown archetype '{name}'") from None


def ability_cooldown(name: str) -> float:
    return ABILITY_COOLDOWNS.get(name, DEFAULT_ABILITY_COOLDOWN)


def scaled_stats(arch: ArchetypeDef, difficulty: float, scale: float) -> tuple[float, float]:
    """Return (health, damage) for a spawn at *difficulty*.

    Stats grow linearly above difficulty 1.0 and shrink below it, never
    dropping under half the template value.
    """
    mult = max(0.5, 1.0 + (difficulty - 1.0) * scale)
    return arch.health * mult, arch.damage * mult
