"""Default agent state policy: perception, countdowns and transitions.

Runs every tick for every agent before its behavior-tree pass::

    IDLE --dwell--> WANDERING --target acquired--> CHASING
    CHASING --in attack range, attack ready--> ATTACKING
    ATTACKING --target left range / dwell over--> CHASING
    CHASING --target lost / beyond give-up radius--> WANDERING
    any --stun--> STUNNED --expiry--> IDLE
    any --health <= 0--> DYING (terminal, entered exactly once)

The give-up radius is a per-archetype multiple (> 1) of the detection
radius, leaving a band where a chasing agent keeps chasing but an idle
one would not start.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from horde.core.enums import AgentState
from horde.core.models import ZERO

if TYPE_CHECKING:
    from horde.ai.context import AIContext
    from horde.core.archetypes import ArchetypeDef
    from horde.core.models import Agent

logger = logging.getLogger(__name__)

ALERT_GAIN_PER_SECOND = 0.5


def detection_radius(agent: Agent, arch: ArchetypeDef) -> float:
    return arch.detection_range * (0.5 + agent.awareness) * arch.intelligence_factor


def give_up_radius(agent: Agent, arch: ArchetypeDef) -> float:
    return detection_radius(agent, arch) * arch.give_up_multiplier


def apply_damage(agent: Agent, amount: float) -> bool:
    """Subtract health; return True only on the transition into DYING.

    Damage to an agent that is already dying is ignored.
    """
    if agent.state == AgentState.DYING:
        return False
    agent.health -= max(0.0, amount)
    if agent.health <= 0.0:
        agent.health = 0.0
        _enter_dying(agent)
        return True
    return False


def stun(agent: Agent, duration: float) -> None:
    """Suppress movement and attacks for *duration* seconds."""
    if agent.state == AgentState.DYING:
        return
    agent.set_state(AgentState.STUNNED)
    agent.stun_remaining = max(agent.stun_remaining, duration)
    agent.move_goal = None
    agent.clear_path()
    agent.velocity = ZERO


def _enter_dying(agent: Agent) -> None:
    agent.set_state(AgentState.DYING)
    agent.move_goal = None
    agent.clear_path()
    agent.target_id = None


def _tick_countdowns(agent: Agent, dt: float) -> None:
    agent.state_time += dt
    if agent.attack_cooldown > 0.0:
        agent.attack_cooldown = max(0.0, agent.attack_cooldown - dt)
    for name, remaining in agent.ability_cooldowns.items():
        if remaining > 0.0:
            agent.ability_cooldowns[name] = max(0.0, remaining - dt)


def update_state(ctx: AIContext, dt: float) -> AgentState:
    """Apply countdowns, perception and the default transitions for one tick."""
    agent = ctx.agent
    arch = ctx.archetype
    _tick_countdowns(agent, dt)

    if agent.state == AgentState.DYING:
        return agent.state
    if agent.health <= 0.0:
        _enter_dying(agent)
        return agent.state

    if agent.state == AgentState.STUNNED:
        agent.stun_remaining = max(0.0, agent.stun_remaining - dt)
        if agent.stun_remaining <= 0.0:
            agent.set_state(AgentState.IDLE)
        return agent.state

    detect = detection_radius(agent, arch)

    # Perception: acquire a target when none is held
    if agent.target_id is None:
        nearby = ctx.world.get_nearby_targets(agent.pos, detect)
        if nearby:
            agent.target_id = nearby[0].id
            logger.debug("Agent #%d acquired target %d", agent.id, agent.target_id)

    target = ctx.target()
    if agent.target_id is not None and target is None:
        agent.target_id = None

    distance = agent.pos.distance(target.pos) if target is not None else None
    sees = (
        target is not None
        and distance <= detect
        and ctx.world.has_line_of_sight(agent.pos, target.pos)
    )
    if sees:
        agent.alert = min(1.0, agent.alert + ALERT_GAIN_PER_SECOND * dt)
        agent.blackboard["last_known_target"] = target.pos
    else:
        agent.alert = max(0.0, agent.alert - ctx.config.alert_decay_rate * dt)

    state = agent.state
    if target is not None and distance > give_up_radius(agent, arch):
        agent.target_id = None
        target = None

    if target is None:
        agent.blackboard.pop("flanked", None)
        if state in (AgentState.CHASING, AgentState.ATTACKING):
            agent.set_state(AgentState.WANDERING)
        elif state == AgentState.IDLE and agent.state_time >= ctx.config.idle_dwell:
            agent.set_state(AgentState.WANDERING)
        return agent.state

    if state in (AgentState.IDLE, AgentState.WANDERING):
        agent.set_state(AgentState.CHASING)
    elif state == AgentState.CHASING:
        if distance <= arch.attack_range and agent.attack_cooldown <= 0.0:
            agent.set_state(AgentState.ATTACKING)
    elif state == AgentState.ATTACKING:
        if distance > arch.attack_range or agent.state_time >= arch.attack_cooldown:
            agent.set_state(AgentState.CHASING)
    return agent.state
