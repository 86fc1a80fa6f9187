"""Tests for the default agent state policy (perception, stun, dying)."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from horde.ai.context import AIContext
from horde.ai.flocking import GroupCoordinator
from horde.ai.state_machine import apply_damage, detection_radius, give_up_radius, stun, update_state
from horde.config import AIConfig
from horde.core.archetypes import ARCHETYPES, get_archetype
from horde.core.enums import AgentState, Domain
from horde.core.grid import OccupancyGrid
from horde.core.models import Agent, Vector2
from horde.core.world import PLAYER_ID, ArenaWorld
from horde.systems.rng import DeterministicRNG
from horde.systems.spatial_hash import SpatialHash


def _make_agent(x: float = 50.0, state: AgentState = AgentState.IDLE, archetype: str = "basic") -> Agent:
    arch = get_archetype(archetype)
    agent = Agent(
        id=1, archetype=archetype, pos=Vector2(x, 0.0), health=arch.health,
        max_health=arch.health, damage=arch.damage, speed=arch.speed,
    )
    agent.state = state
    return agent


def _make_ctx(agent: Agent, world: ArenaWorld | None = None) -> AIContext:
    cfg = AIConfig()
    if world is None:
        world = ArenaWorld(OccupancyGrid(100, 100, 5.0))
    events = []
    return AIContext(
        agent=agent,
        archetype=get_archetype(agent.archetype),
        world=world,
        agents={agent.id: agent},
        spatial=SpatialHash(),
        groups=GroupCoordinator(cfg),
        rng=DeterministicRNG(1).stream(Domain.AI_DECISION, agent.id),
        config=cfg,
        now=0.0,
        tick=0,
        emit=events.append,
    )


class TestRadii:
    def test_give_up_exceeds_detection_for_every_archetype(self):
        agent = _make_agent()
        for arch in ARCHETYPES.values():
            assert give_up_radius(agent, arch) > detection_radius(agent, arch)

    def test_intelligence_widens_detection(self):
        agent = _make_agent()
        basic = get_archetype("basic")
        assert detection_radius(agent, basic) == basic.detection_range


class TestPerception:
    def test_idle_agent_acquires_player_in_range(self):
        agent = _make_agent(50.0)
        assert update_state(_make_ctx(agent), 0.1) == AgentState.CHASING
        assert agent.target_id == PLAYER_ID
        assert agent.blackboard["last_known_target"] == Vector2()

    def test_idle_agent_ignores_player_in_hysteresis_band(self):
        agent = _make_agent(120.0)
        assert update_state(_make_ctx(agent), 0.1) == AgentState.IDLE
        assert agent.target_id is None

    def test_chasing_agent_keeps_target_in_hysteresis_band(self):
        agent = _make_agent(120.0, AgentState.CHASING)
        agent.target_id = PLAYER_ID
        assert update_state(_make_ctx(agent), 0.1) == AgentState.CHASING
        assert agent.target_id == PLAYER_ID

    def test_chasing_agent_gives_up_beyond_radius(self):
        agent = _make_agent(200.0, AgentState.CHASING)
        agent.target_id = PLAYER_ID
        assert update_state(_make_ctx(agent), 0.1) == AgentState.WANDERING
        assert agent.target_id is None

    def test_target_vanishes_when_player_removed(self):
        world = ArenaWorld(OccupancyGrid(100, 100, 5.0))
        world.set_player(None)
        agent = _make_agent(20.0, AgentState.CHASING)
        agent.target_id = PLAYER_ID
        assert update_state(_make_ctx(agent, world), 0.1) == AgentState.WANDERING
        assert agent.target_id is None

    def test_chasing_in_attack_range_attacks(self):
        agent = _make_agent(10.0, AgentState.CHASING)
        agent.target_id = PLAYER_ID
        assert update_state(_make_ctx(agent), 0.1) == AgentState.ATTACKING

    def test_idle_dwell_turns_into_wandering(self):
        agent = _make_agent(300.0)
        ctx = _make_ctx(agent)
        update_state(ctx, 1.0)
        assert agent.state == AgentState.IDLE
        update_state(ctx, 1.5)
        assert agent.state == AgentState.WANDERING

    def test_alert_rises_with_sight_and_decays_without(self):
        agent = _make_agent(50.0)
        ctx = _make_ctx(agent)
        update_state(ctx, 1.0)
        raised = agent.alert
        assert raised > 0.0
        ctx.world.set_player(None)
        update_state(ctx, 1.0)
        assert agent.alert < raised

    def test_cooldowns_tick_down(self):
        agent = _make_agent(300.0)
        agent.attack_cooldown = 0.5
        agent.ability_cooldowns["bite"] = 1.0
        update_state(_make_ctx(agent), 0.75)
        assert agent.attack_cooldown == 0.0
        assert agent.ability_cooldowns["bite"] == 0.25


class TestStunAndDamage:
    def test_stun_expires_back_to_idle(self):
        agent = _make_agent(50.0, AgentState.CHASING)
        agent.move_goal = Vector2(1, 1)
        stun(agent, 1.0)
        assert agent.state == AgentState.STUNNED
        assert agent.move_goal is None
        ctx = _make_ctx(agent)
        assert update_state(ctx, 0.5) == AgentState.STUNNED
        assert update_state(ctx, 0.6) == AgentState.IDLE

    def test_lethal_damage_enters_dying_once(self):
        agent = _make_agent()
        assert apply_damage(agent, 40.0) is False
        assert apply_damage(agent, 1000.0) is True
        assert agent.state == AgentState.DYING
        assert agent.health == 0.0
        assert apply_damage(agent, 10.0) is False

    def test_dying_agent_cannot_be_stunned(self):
        agent = _make_agent()
        apply_damage(agent, 1000.0)
        stun(agent, 2.0)
        assert agent.state == AgentState.DYING

    def test_zero_health_detected_on_update(self):
        agent = _make_agent()
        agent.health = 0.0
        assert update_state(_make_ctx(agent), 0.1) == AgentState.DYING
        assert update_state(_make_ctx(agent), 0.1) == AgentState.DYING
