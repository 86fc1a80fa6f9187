"""AISystem: the authoritative per-tick driver for every hostile agent.

Tick phases:
  1. Adaptation: performance ingestion, difficulty evaluation, spawn cycle
  2. Level of detail: re-tier agents by distance to the player
  3. Agents: state policy, behavior-tree pass, pathfinding, movement
  4. Cleanup: despawn distant agents, enforce the cap, remove the dead

Fast work (state policy, movement) runs every tick; slow work (tree
passes, pathfinding, LOD, difficulty, spawning) runs on its own cadence
measured against the system clock, which only advances by the ``dt``
passed to ``tick_once``.  A fixed seed and delta sequence therefore reproduce
the same run exactly.
"""

from __future__ import annotations

import logging
import time
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping

from horde.ai.actions import ACTION_HANDLERS
from horde.ai.behavior_tree import BehaviorTreeEvaluator
from horde.ai.conditions import CONDITION_HANDLERS
from horde.ai.context import AIContext
from horde.ai.flocking import GroupCoordinator
from horde.ai.pathfinding import Pathfinder
from horde.ai.state_machine import apply_damage, stun, update_state
from horde.ai.trees import get_tree
from horde.core.archetypes import get_archetype, scaled_stats
from horde.core.enums import AgentState, Domain, LODTier
from horde.core.models import ZERO, Agent, Vector2
from horde.core.snapshot import Snapshot
from horde.difficulty.controller import DifficultyController
from horde.difficulty.performance import PerformanceTracker
from horde.difficulty.spawning import SpawnPatternSelector
from horde.engine.events import AgentRemoved, AgentSpawned, DifficultyChanged
from horde.systems.rng import DeterministicRNG
from horde.systems.spatial_hash import SpatialHash
from horde.utils.event_log import EventLog

if TYPE_CHECKING:
    from horde.config import AIConfig
    from horde.core.world import WorldQuery
    from horde.difficulty.controller import DifficultyRecord
    from horde.difficulty.performance import PerformanceSignals
    from horde.difficulty.spawning import SpawnRequest
    from horde.engine.events import AIEvent
    from horde.systems.rng import RandomStream
    from horde.utils.replay import ReplayRecorder

logger = logging.getLogger(__name__)


class AISystem:
    """Owns agents, groups and spawn requests for one game session.

    Every registry lives here and is passed by reference to the pieces
    that need it; ``teardown`` releases all of them.
    """

    def __init__(
        self,
        config: AIConfig,
        world: WorldQuery,
        event_log: EventLog | None = None,
        recorder: ReplayRecorder | None = None,
    ) -> None:
        self._config = config
        self._world = world
        self._events = event_log if event_log is not None else EventLog(config.event_log_size)
        self._recorder = recorder
        self._evaluator = BehaviorTreeEvaluator(CONDITION_HANDLERS, ACTION_HANDLERS)
        self._pathfinder = Pathfinder(
            world.is_cell_walkable, config.path_max_nodes, config.allow_diagonal, config.avoid_corner_squeeze,
        )
        self._init_state()

    def _init_state(self) -> None:
        cfg = self._config
        self._rng = DeterministicRNG(cfg.seed)
        self._agents: dict[int, Agent] = {}
        self._streams: dict[int, RandomStream] = {}
        self._spatial = SpatialHash()
        self._groups = GroupCoordinator(cfg)
        self._tracker = PerformanceTracker(cfg)
        self._difficulty = DifficultyController(cfg, self._tracker)
        self._spawner = SpawnPatternSelector(cfg, self._rng)
        self._pending_removal: dict[int, str] = {}
        self._tick_events: list[AIEvent] = []
        self._tick = 0
        self._time = 0.0
        self._next_agent_id = 1
        self._last_tick_ms = 0.0

    # -- read access --

    @property
    def config(self) -> AIConfig:
        return self._config

    @property
    def world(self) -> WorldQuery:
        return self._world

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def time(self) -> float:
        return self._time

    @property
    def agents(self) -> Mapping[int, Agent]:
        return MappingProxyType(self._agents)

    @property
    def groups(self) -> GroupCoordinator:
        return self._groups

    @property
    def tracker(self) -> PerformanceTracker:
        return self._tracker

    @property
    def difficulty(self) -> DifficultyController:
        return self._difficulty

    @property
    def spawner(self) -> SpawnPatternSelector:
        return self._spawner

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def last_tick_ms(self) -> float:
        return self._last_tick_ms

    def get_agent(self, agent_id: int) -> Agent | None:
        return self._agents.get(agent_id)

    def active_count(self) -> int:
        return sum(1 for a in self._agents.values() if a.alive and a.id not in self._pending_removal)

    def create_snapshot(self) -> Snapshot:
        return Snapshot.from_system(self)

    def _emit(self, event: AIEvent) -> None:
        self._tick_events.append(event)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick_once(self, dt: float, signals: PerformanceSignals | None = None) -> list[AIEvent]:
        """Advance the system by *dt* seconds; returns the events emitted."""
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")
        t0 = time.perf_counter()
        self._time += dt
        now = self._time

        player = self._world.get_player_position()
        velocity = self._world.get_player_velocity()

        # --- Phase 1: adaptation ---
        self._tracker.update(dt, now, signals)
        record = self._difficulty.update(now)
        if record is not None:
            self._announce_difficulty(record)
        self._spawner.update(now, self._difficulty.level, self.active_count(), player, velocity)
        for request in self._spawner.take_pending():
            self._fulfil(request)

        # --- Phase 2: level of detail ---
        self._assign_lod(now, player)

        # --- Phase 3: agents ---
        for agent_id in sorted(self._agents):
            agent = self._agents[agent_id]
            try:
                self._update_agent(agent, dt, now)
            except Exception:
                logger.exception("Tick %d: agent #%d update failed", self._tick, agent_id)

        # --- Phase 4: cleanup ---
        self._despawn_distant(player)
        self._enforce_cap(player)
        self._remove_pending()

        events = self._tick_events
        self._tick_events = []
        self._events.append_many(events)
        if self._recorder is not None:
            self._recorder.record_tick(
                self._tick, now, self._difficulty.level,
                (self._agents[aid] for aid in sorted(self._agents)), events,
            )
        self._tick += 1
        self._last_tick_ms = (time.perf_counter() - t0) * 1000.0
        logger.debug(
            "Tick %d: %d agents, %d events in %.2fms",
            self._tick, len(self._agents), len(events), self._last_tick_ms,
        )
        return events

    def run(self, ticks: int, dt: float) -> None:
        """Run *ticks* fixed steps, flushing the replay at the end."""
        logger.info("=== AI session started (seed=%d) ===", self._config.seed)
        for _ in range(ticks):
            self.tick_once(dt)
            if self._tick % 100 == 0:
                logger.info(
                    "Tick %d: %d agents, difficulty %.2f",
                    self._tick, self.active_count(), self._difficulty.level,
                )
        logger.info("=== AI session finished at tick %d ===", self._tick)
        if self._recorder is not None:
            self._recorder.flush()

    # -- phase helpers --

    def _context(self, agent: Agent, now: float) -> AIContext:
        stream = self._streams.get(agent.id)
        if stream is None:
            stream = self._streams[agent.id] = self._rng.stream(Domain.AI_DECISION, agent.id)
        return AIContext(
            agent=agent,
            archetype=get_archetype(agent.archetype),
            world=self._world,
            agents=self._agents,
            spatial=self._spatial,
            groups=self._groups,
            rng=stream,
            config=self._config,
            now=now,
            tick=self._tick,
            emit=self._emit,
        )

    def _assign_lod(self, now: float, player: Vector2 | None) -> None:
        near, mid, far = self._config.lod_distances
        for agent in self._agents.values():
            if now - agent.last_lod_at < self._config.lod_interval:
                continue
            agent.last_lod_at = now
            if player is None:
                agent.lod = LODTier.FROZEN
                continue
            distance = agent.pos.distance(player)
            if distance < near:
                agent.lod = LODTier.FULL
            elif distance < mid:
                agent.lod = LODTier.REDUCED
            elif distance < far:
                agent.lod = LODTier.MINIMAL
            else:
                agent.lod = LODTier.FROZEN

    def _update_agent(self, agent: Agent, dt: float, now: float) -> None:
        ctx = self._context(agent, now)
        state = update_state(ctx, dt)
        if state == AgentState.DYING:
            self._pending_removal.setdefault(agent.id, "killed")
            agent.velocity = ZERO
            return
        if state == AgentState.STUNNED or agent.lod == LODTier.FROZEN:
            agent.velocity = ZERO
            return

        cfg = self._config
        thinks = agent.lod <= LODTier.REDUCED
        if thinks and now - agent.last_decision_at >= cfg.decision_interval:
            agent.last_decision_at = now
            status = self._evaluator.evaluate(get_tree(ctx.archetype.tree), ctx)
            logger.debug("Agent #%d %s -> %s (%s)", agent.id, agent.state.name, status.name, agent.cursor)

        agent.steering = self._groups.steering(agent, self._agents)
        if thinks and agent.move_goal is not None and now - agent.last_path_at >= cfg.pathfinding_interval:
            self._plan_path(agent, now)
        self._integrate(agent, dt)

    def _plan_path(self, agent: Agent, now: float) -> None:
        agent.last_path_at = now
        grid = self._world.grid
        cells = self._pathfinder.find_path(grid.world_to_cell(agent.pos), grid.world_to_cell(agent.move_goal))
        agent.path_index = 0
        if cells is None:
            # No route: steer straight at the goal and let collisions flag obstacles.
            agent.path = []
            return
        agent.path = [grid.cell_to_world(c) for c in cells[:-1]]

    def _integrate(self, agent: Agent, dt: float) -> None:
        goal = agent.move_goal
        if goal is None or dt <= 0:
            agent.velocity = ZERO
            return
        cfg = self._config
        while agent.path_index < len(agent.path) and agent.pos.distance(agent.path[agent.path_index]) < cfg.waypoint_radius:
            agent.path_index += 1
        waypoint = agent.path[agent.path_index] if agent.path_index < len(agent.path) else goal

        aim = waypoint + agent.steering
        offset = aim - agent.pos
        step = agent.speed * agent.speed_multiplier * dt
        if offset.length() <= step:
            new_pos = aim
        else:
            new_pos = agent.pos + offset.normalized() * step

        if not self._world.is_position_walkable(new_pos):
            agent.blackboard["obstacle_detected"] = True
            agent.velocity = ZERO
            agent.clear_path()
            agent.last_path_at = float("-inf")
            return

        agent.velocity = (new_pos - agent.pos) / dt
        self._spatial.move(agent.id, new_pos)
        agent.pos = new_pos

    def _despawn_distant(self, player: Vector2 | None) -> None:
        if player is None:
            return
        limit = self._config.despawn_distance
        for agent in self._agents.values():
            if agent.pos.distance(player) > limit:
                self._pending_removal.setdefault(agent.id, "despawned")

    def _enforce_cap(self, player: Vector2 | None) -> None:
        live = [a for a in self._agents.values() if a.alive and a.id not in self._pending_removal]
        excess = len(live) - self._spawner.agent_limit(self._difficulty.level)
        if excess <= 0:
            return
        origin = player if player is not None else ZERO
        live.sort(key=lambda a: (-a.pos.distance(origin), -a.id))
        for agent in live[:excess]:
            self._pending_removal[agent.id] = "culled"
        logger.info("Tick %d: culled %d agents over the cap", self._tick, excess)

    def _remove_pending(self) -> None:
        for agent_id in sorted(self._pending_removal):
            reason = self._pending_removal[agent_id]
            agent = self._agents.pop(agent_id, None)
            if agent is None:
                continue
            self._groups.remove(agent)
            self._spatial.remove(agent_id)
            self._streams.pop(agent_id, None)
            self._emit(AgentRemoved(tick=self._tick, agent_id=agent_id, reason=reason))
            logger.debug("Tick %d: agent #%d removed (%s)", self._tick, agent_id, reason)
        self._pending_removal.clear()

    def _announce_difficulty(self, record: DifficultyRecord) -> None:
        self._emit(DifficultyChanged(tick=self._tick, level=record.difficulty, reason=record.reason))

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------

    def _fulfil(self, request: SpawnRequest) -> Agent | None:
        try:
            arch = get_archetype(request.archetype)
        except KeyError:
            self._spawner.mark_failed(request, "unknown archetype")
            return None
        if not self._world.is_position_walkable(request.position):
            self._spawner.mark_failed(request, "blocked or out of bounds")
            return None

        health, damage = scaled_stats(arch, self._difficulty.level, self._config.stat_difficulty_scale)
        agent = Agent(
            id=self._next_agent_id,
            archetype=arch.name,
            pos=request.position,
            health=health,
            max_health=health,
            damage=damage,
            speed=arch.speed,
        )
        self._next_agent_id += 1
        agent.blackboard["spawn_position"] = request.position
        self._agents[agent.id] = agent
        self._spatial.insert(agent.id, agent.pos)
        if request.group_tag is not None:
            self._groups.join_tag(agent, request.group_tag)
        self._spawner.mark_fulfilled(request, agent.id)
        self._emit(AgentSpawned(
            tick=self._tick, agent_id=agent.id, agent_type=arch.name,
            position=agent.pos, pattern=request.pattern,
        ))
        return agent

    def request_spawn(self, position: Vector2, archetype: str) -> SpawnRequest:
        """Queue a manual spawn; it is fulfilled or rejected on the next tick."""
        return self._spawner.request_spawn(position, archetype, self._time)

    def spawn(self, archetype: str, position: Vector2) -> Agent | None:
        """Spawn immediately; unknown archetypes raise KeyError.

        Returns None when the position is rejected.
        """
        get_archetype(archetype)
        request = self._spawner.request_spawn(position, archetype, self._time, queue=False)
        agent = self._fulfil(request)
        self._flush_outside_tick()
        return agent

    # ------------------------------------------------------------------
    # External stimuli
    # ------------------------------------------------------------------

    def damage_agent(self, agent_id: int, amount: float) -> bool:
        """Apply damage; True when this hit killed the agent."""
        agent = self._agents.get(agent_id)
        if agent is None:
            return False
        killed = apply_damage(agent, amount)
        if killed:
            self._pending_removal.setdefault(agent_id, "killed")
        return killed

    def stun_agent(self, agent_id: int, duration: float | None = None) -> bool:
        agent = self._agents.get(agent_id)
        if agent is None or not agent.alive:
            return False
        stun(agent, self._config.stun_duration if duration is None else duration)
        return True

    def emit_noise(self, position: Vector2, radius: float) -> int:
        """Let every agent within *radius* hear a sound at *position*."""
        heard = 0
        for agent_id in self._spatial.query_radius(position, radius):
            agent = self._agents.get(agent_id)
            if agent is None or not agent.alive:
                continue
            agent.blackboard["sound_position"] = position
            heard += 1
        return heard

    def remove_agent(self, agent_id: int, reason: str = "removed") -> bool:
        """Schedule removal at the end of the current or next tick."""
        if agent_id not in self._agents:
            return False
        self._pending_removal.setdefault(agent_id, reason)
        return True

    def set_difficulty_override(self, value: float) -> float:
        record = self._difficulty.set_override(value, self._time)
        self._announce_difficulty(record)
        self._flush_outside_tick()
        return record.difficulty

    def clear_difficulty_override(self) -> None:
        self._difficulty.clear_override()

    def _flush_outside_tick(self) -> None:
        events, self._tick_events = self._tick_events, []
        self._events.append_many(events)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def teardown(self) -> None:
        """Release every registry; the system is empty afterwards."""
        self._agents.clear()
        self._streams.clear()
        self._spatial.clear()
        self._groups.clear()
        self._pending_removal.clear()
        self._tick_events.clear()
        logger.info("AI system torn down at tick %d", self._tick)

    def reset(self) -> None:
        """Tear down and start a fresh session with the same config and world."""
        self.teardown()
        self._events.clear()
        self._init_state()
