"""Scripted session driver: arena generation plus a stand-in player.

The AI core needs an embedding game to feed it a player and gameplay
signals.  For the CLI, the diagnostics server and profiling, this module
plays that role: the player drives a loop around the arena, shoots the
nearest agent on a fixed cadence and loses health to attacks that land
near it.  Everything is seeded, so a scripted session is as repeatable
as the AI system itself.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from horde.core.enums import AgentState, Domain
from horde.core.grid import OccupancyGrid
from horde.core.models import ZERO, Vector2
from horde.core.world import ArenaWorld
from horde.difficulty.performance import PerformanceSignals
from horde.engine.events import AgentAttack, AgentRemoved
from horde.engine.system import AISystem
from horde.systems.rng import DeterministicRNG

if TYPE_CHECKING:
    from horde.config import AIConfig
    from horde.engine.events import AIEvent
    from horde.utils.event_log import EventLog
    from horde.utils.replay import ReplayRecorder

logger = logging.getLogger(__name__)

OBSTACLE_COUNT = 24
OBSTACLE_SIZE = (2, 6)              # cells per side
CLEAR_RADIUS = 12                   # cells kept open around the map centre

ORBIT_RADIUS = 120.0
PLAYER_SPEED = 20.0
FIRE_INTERVAL = 0.5
FIRE_RANGE = 60.0
HIT_CHANCE = 0.6
SHOT_DAMAGE = 25.0
NOISE_RADIUS = 150.0
HIT_RADIUS = 15.0                   # attacks aimed within this of the player land
DAMAGE_TO_HEALTH = 0.2              # health percent lost per point of damage
HEALTH_REGEN = 1.0                  # health percent per second


def build_arena(config: AIConfig) -> ArenaWorld:
    """Grid-backed arena with seeded rectangular obstacles."""
    grid = OccupancyGrid(config.grid_width, config.grid_height, config.cell_size)
    rng = DeterministicRNG(config.seed)
    cx, cy = config.grid_width // 2, config.grid_height // 2
    lo, hi = OBSTACLE_SIZE
    placed = 0
    for i in range(OBSTACLE_COUNT):
        for attempt in range(20):
            w = rng.next_int(Domain.DRIVER, i, attempt * 4, lo, hi)
            h = rng.next_int(Domain.DRIVER, i, attempt * 4 + 1, lo, hi)
            x = rng.next_int(Domain.DRIVER, i, attempt * 4 + 2, 0, config.grid_width - w)
            y = rng.next_int(Domain.DRIVER, i, attempt * 4 + 3, 0, config.grid_height - h)
            if abs(x + w / 2 - cx) < CLEAR_RADIUS + w and abs(y + h / 2 - cy) < CLEAR_RADIUS + h:
                continue
            grid.block_rect(x, y, x + w - 1, y + h - 1)
            placed += 1
            break
    logger.info("Arena %dx%d built with %d obstacles (%d cells blocked)",
                grid.width, grid.height, placed, grid.blocked_count())
    return ArenaWorld(grid)


class ScriptedPlayer:
    """Orbits the arena centre, shooting and taking hits."""

    def __init__(self, world: ArenaWorld, rng: DeterministicRNG) -> None:
        self._world = world
        self._stream = rng.stream(Domain.DRIVER, 1)
        self.angle = 0.0
        self.health = 100.0
        self.shots_fired = 0
        self.shots_hit = 0
        self.kills = 0
        self.combo = 0
        self.damage_dealt = 0.0
        self.damage_taken = 0.0
        self._fire_timer = 0.0
        self._place(ZERO)

    def _place(self, velocity: Vector2) -> None:
        self._world.set_player(Vector2.from_angle(self.angle, ORBIT_RADIUS), velocity)

    @property
    def position(self) -> Vector2 | None:
        return self._world.get_player_position()

    def drive(self, dt: float) -> None:
        self.angle += PLAYER_SPEED / ORBIT_RADIUS * dt
        heading = Vector2.from_angle(self.angle + math.pi / 2, PLAYER_SPEED)
        self._place(heading)
        self.health = min(100.0, self.health + HEALTH_REGEN * dt)

    def fire(self, system: AISystem, dt: float) -> None:
        self._fire_timer += dt
        if self._fire_timer < FIRE_INTERVAL:
            return
        self._fire_timer = 0.0
        pos = self.position
        if pos is None:
            return
        targets = [a for a in system.agents.values() if a.alive and a.pos.distance(pos) <= FIRE_RANGE]
        if not targets:
            return
        target = min(targets, key=lambda a: (a.pos.distance(pos), a.id))
        self.shots_fired += 1
        system.emit_noise(pos, NOISE_RADIUS)
        if not self._stream.chance(HIT_CHANCE):
            self.combo = 0
            return
        self.shots_hit += 1
        self.damage_dealt += SHOT_DAMAGE
        if system.damage_agent(target.id, SHOT_DAMAGE):
            self.kills += 1
            self.combo += 1

    def absorb(self, events: list[AIEvent]) -> None:
        pos = self.position
        if pos is None:
            return
        for event in events:
            if isinstance(event, AgentAttack) and event.target_position.distance(pos) <= HIT_RADIUS:
                self.damage_taken += event.damage
                self.health -= event.damage * DAMAGE_TO_HEALTH
                self.combo = 0
        if self.health <= 0.0:
            logger.info("Scripted player wrecked; repairing to full health")
            self.health = 100.0

    def signals(self, system: AISystem) -> PerformanceSignals:
        threats = sum(
            1 for a in system.agents.values()
            if a.state in (AgentState.CHASING, AgentState.ATTACKING)
        )
        velocity = self._world.get_player_velocity()
        return PerformanceSignals(
            game_time=system.time,
            shots_fired=self.shots_fired,
            shots_hit=self.shots_hit,
            kills=self.kills,
            combo=self.combo,
            damage_dealt=self.damage_dealt,
            damage_taken=self.damage_taken,
            vehicle_speed=velocity.length() if velocity is not None else None,
            vehicle_position=self.position,
            health_percentage=self.health,
            objectives_completed=self.kills // 10,
            active_threats=threats,
            collisions=0,
        )


class SimulationDriver:
    """An AI system plus the scripted player that feeds it."""

    def __init__(
        self,
        config: AIConfig,
        event_log: EventLog | None = None,
        recorder: ReplayRecorder | None = None,
    ) -> None:
        self.config = config
        self.world = build_arena(config)
        self.system = AISystem(config, self.world, event_log=event_log, recorder=recorder)
        self.player = ScriptedPlayer(self.world, DeterministicRNG(config.seed))
        self.kills_seen = 0

    def step(self, dt: float | None = None) -> list[AIEvent]:
        """Advance player and AI by one tick."""
        dt = self.config.tick_rate if dt is None else dt
        self.player.drive(dt)
        self.player.fire(self.system, dt)
        events = self.system.tick_once(dt, self.player.signals(self.system))
        self.player.absorb(events)
        self.kills_seen += sum(1 for e in events if isinstance(e, AgentRemoved) and e.reason == "killed")
        return events

    def run(self, ticks: int, dt: float | None = None) -> None:
        logger.info("=== Scripted session started (seed=%d, %d ticks) ===", self.config.seed, ticks)
        for i in range(1, ticks + 1):
            self.step(dt)
            if i % 100 == 0:
                logger.info(
                    "Tick %d: %d agents, difficulty %.2f, performance %.2f, player health %.0f%%",
                    i, self.system.active_count(), self.system.difficulty.level,
                    self.system.tracker.score, self.player.health,
                )
        logger.info("=== Scripted session finished: %d kills ===", self.kills_seen)
