"""Action handlers: side-effecting behaviors for one agent.

Every handler has the signature ``(ctx, node) -> Status``.  Actions set
movement goals, update the blackboard and emit outward intents (attacks,
combat effects); they never move the agent directly.  Movement is
integrated by the AI system after the tree pass.

Movement actions return RUNNING while the agent is on its way; one-shot
actions (attacks, roars, group formation) return SUCCESS.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from horde.ai.behavior_tree import ActionKind, Status
from horde.core.archetypes import ability_cooldown
from horde.core.enums import AgentState
from horde.core.models import Vector2
from horde.engine.events import AgentAttack, CombatEffect

if TYPE_CHECKING:
    from horde.ai.behavior_tree import Action, ActionHandler
    from horde.ai.context import AIContext

logger = logging.getLogger(__name__)

SPRINT_MULTIPLIER = 1.5
CHARGE_MULTIPLIER = 2.0
WANDER_RADIUS = 100.0
WANDER_RETARGET = 5.0
PATROL_RADIUS = 150.0
PATROL_POINTS = 4
PATROL_ADVANCE = 20.0
GUARD_RADIUS = 30.0
RETREAT_DISTANCE = 80.0
FLANK_DISTANCE = 60.0
FOLLOW_DISTANCE = 40.0
COORDINATE_RADIUS = 50.0
VANTAGE_SPREAD = 100.0
VANTAGE_CANDIDATES = 3
HIGH_GROUND_DISTANCE = 100.0
ROAR_ALERT_RADIUS = 80.0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _use_ability(ctx: AIContext, name: str) -> bool:
    """Put *name* on cooldown if the archetype has it and it is ready."""
    agent = ctx.agent
    if name not in ctx.archetype.abilities or not agent.ability_ready(name):
        return False
    agent.ability_cooldowns[name] = ability_cooldown(name)
    return True


def _strike(ctx: AIContext, target_pos: Vector2, ability: str) -> None:
    agent = ctx.agent
    ctx.emit(AgentAttack(
        tick=ctx.tick, agent_id=agent.id, position=agent.pos,
        target_position=target_pos, damage=agent.damage, ability_name=ability,
    ))
    ctx.emit(CombatEffect(
        tick=ctx.tick, effect_type="attack", position=agent.pos,
        intensity=agent.damage / 50.0,
    ))


def _pursue(ctx: AIContext, multiplier: float) -> Status:
    goal = ctx.target_position()
    if goal is None:
        return Status.FAILURE
    ctx.move_to(goal, multiplier)
    agent = ctx.agent
    if agent.target_id is not None and agent.state in (AgentState.IDLE, AgentState.WANDERING):
        agent.set_state(AgentState.CHASING)
    return Status.RUNNING


def _random_offset(ctx: AIContext, max_distance: float) -> Vector2:
    angle = ctx.rng.uniform(0.0, 2.0 * math.pi)
    return Vector2.from_angle(angle, ctx.rng.uniform(0.0, max_distance))


def _arrived(ctx: AIContext, goal: Vector2, radius: float | None = None) -> bool:
    r = ctx.config.arrival_radius if radius is None else radius
    return ctx.agent.pos.distance(goal) < r


# ---------------------------------------------------------------------------
# Combat
# ---------------------------------------------------------------------------

def attack_target(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    arch = ctx.archetype
    target = ctx.target()
    if target is None:
        return Status.FAILURE
    if agent.pos.distance(target.pos) > node.param("range", arch.attack_range):
        return Status.FAILURE
    if agent.attack_cooldown > 0.0:
        return Status.RUNNING
    ability = node.param("ability", arch.abilities[0] if arch.abilities else "attack")
    _strike(ctx, target.pos, ability)
    agent.attack_cooldown = arch.attack_cooldown
    agent.set_state(AgentState.ATTACKING)
    ctx.stop()
    return Status.SUCCESS


def spit_at_target(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    target = ctx.target()
    if target is None or not _use_ability(ctx, node.param("ability", "acid_spit")):
        return Status.FAILURE
    ctx.emit(AgentAttack(
        tick=ctx.tick, agent_id=agent.id, position=agent.pos,
        target_position=target.pos, damage=agent.damage, ability_name="acid_spit",
    ))
    ctx.emit(CombatEffect(tick=ctx.tick, effect_type="acid", position=target.pos, intensity=0.6))
    agent.set_state(AgentState.ATTACKING)
    ctx.stop()
    return Status.SUCCESS


def charge_target(ctx: AIContext, node: Action) -> Status:
    if ctx.target() is None:
        return Status.FAILURE
    if _use_ability(ctx, "charge_attack"):
        ctx.emit(CombatEffect(tick=ctx.tick, effect_type="charge", position=ctx.agent.pos, intensity=1.0))
    return _pursue(ctx, CHARGE_MULTIPLIER)


def roar(ctx: AIContext, node: Action) -> Status:
    """Intimidate: a combat effect plus full alert for allies in earshot."""
    agent = ctx.agent
    if not agent.ability_ready("intimidate"):
        return Status.FAILURE
    agent.ability_cooldowns["intimidate"] = ability_cooldown("intimidate")
    ctx.emit(CombatEffect(
        tick=ctx.tick, effect_type="roar", position=agent.pos,
        intensity=ctx.archetype.damage / 50.0,
    ))
    for ally in ctx.nearby_agents(node.param("radius", ROAR_ALERT_RADIUS)):
        ally.alert = 1.0
    return Status.SUCCESS


def break_obstacle(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    agent.blackboard["obstacle_detected"] = False
    ctx.emit(CombatEffect(
        tick=ctx.tick, effect_type="obstacle_destroyed", position=agent.pos,
        intensity=ctx.archetype.damage / 50.0,
    ))
    agent.clear_path()
    return Status.SUCCESS


# ---------------------------------------------------------------------------
# Pursuit and evasion
# ---------------------------------------------------------------------------

def move_towards_target(ctx: AIContext, node: Action) -> Status:
    return _pursue(ctx, 1.0)


def sprint_towards_target(ctx: AIContext, node: Action) -> Status:
    _use_ability(ctx, "sprint")
    return _pursue(ctx, node.param("multiplier", SPRINT_MULTIPLIER))


def flank_target(ctx: AIContext, node: Action) -> Status:
    """Approach from the side: a point beside the target, then close in."""
    agent = ctx.agent
    target = ctx.target()
    if target is None:
        return Status.FAILURE
    approach = (target.pos - agent.pos).normalized()
    side = 1.0 if agent.id % 2 else -1.0
    flank_point = target.pos + Vector2(-approach.y * side, approach.x * side) * node.param("distance", FLANK_DISTANCE)
    if agent.blackboard.get("flanked") or _arrived(ctx, flank_point, ctx.config.waypoint_radius):
        agent.blackboard["flanked"] = True
        return _pursue(ctx, 1.0)
    ctx.move_to(flank_point)
    return Status.RUNNING


def retreat_from_target(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    target = ctx.target()
    if target is None:
        return Status.FAILURE
    away = (agent.pos - target.pos).normalized()
    if away.length() == 0.0:
        away = Vector2.from_angle(ctx.rng.uniform(0.0, 2.0 * math.pi))
    ctx.move_to(agent.pos + away * node.param("distance", RETREAT_DISTANCE))
    return Status.RUNNING


def find_vantage_point(ctx: AIContext, node: Action) -> Status:
    """Move to the closest of a few remembered walkable points near the spawn area."""
    agent = ctx.agent
    points: list[Vector2] | None = agent.blackboard.get("vantage_points")
    if not points:
        grid = ctx.world.grid
        points = []
        for _ in range(VANTAGE_CANDIDATES * 4):
            candidate = agent.pos + Vector2(
                ctx.rng.uniform(-VANTAGE_SPREAD, VANTAGE_SPREAD),
                ctx.rng.uniform(-VANTAGE_SPREAD, VANTAGE_SPREAD),
            )
            if ctx.world.is_cell_walkable(grid.world_to_cell(candidate)):
                points.append(candidate)
            if len(points) == VANTAGE_CANDIDATES:
                break
        if not points:
            return Status.FAILURE
        agent.blackboard["vantage_points"] = points
    closest = min(points, key=agent.pos.distance)
    if _arrived(ctx, closest):
        ctx.stop()
        return Status.SUCCESS
    ctx.move_to(closest)
    return Status.RUNNING


def seek_high_ground(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    goal = agent.blackboard.get("high_ground")
    if goal is None or _arrived(ctx, goal):
        angle = ctx.rng.uniform(0.0, 2.0 * math.pi)
        goal = agent.pos + Vector2.from_angle(angle, HIGH_GROUND_DISTANCE)
        agent.blackboard["high_ground"] = goal
    ctx.move_to(goal)
    return Status.RUNNING


# ---------------------------------------------------------------------------
# Idle behaviors
# ---------------------------------------------------------------------------

def investigate_sound(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    sound = agent.blackboard.get("sound_position")
    if sound is None:
        return Status.FAILURE
    if _arrived(ctx, sound, ctx.config.waypoint_radius):
        agent.blackboard.pop("sound_position", None)
        ctx.stop()
        return Status.SUCCESS
    ctx.move_to(sound)
    return Status.RUNNING


def wander(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    goal = agent.blackboard.get("wander_target")
    if goal is None or ctx.now >= agent.blackboard.get("wander_until", 0.0) or _arrived(ctx, goal):
        goal = agent.pos + _random_offset(ctx, node.param("radius", WANDER_RADIUS))
        agent.blackboard["wander_target"] = goal
        agent.blackboard["wander_until"] = ctx.now + WANDER_RETARGET
    ctx.move_to(goal)
    if agent.state == AgentState.IDLE:
        agent.set_state(AgentState.WANDERING)
    return Status.RUNNING


def patrol(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    points: list[Vector2] | None = agent.blackboard.get("patrol_points")
    if not points:
        origin = agent.blackboard.get("spawn_position", agent.pos)
        radius = node.param("radius", PATROL_RADIUS)
        step = 2.0 * math.pi / PATROL_POINTS
        points = [origin + Vector2.from_angle(step * i, radius) for i in range(PATROL_POINTS)]
        agent.blackboard["patrol_points"] = points
        agent.blackboard["patrol_index"] = 0
    index = agent.blackboard.get("patrol_index", 0)
    if _arrived(ctx, points[index], PATROL_ADVANCE):
        index = (index + 1) % len(points)
        agent.blackboard["patrol_index"] = index
    ctx.move_to(points[index])
    return Status.RUNNING


def guard_area(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    post = agent.blackboard.get("guard_position") or agent.blackboard.get("spawn_position", agent.pos)
    if agent.pos.distance(post) > node.param("radius", GUARD_RADIUS):
        ctx.move_to(post)
    else:
        ctx.stop()
    return Status.RUNNING


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

def coordinate_with_group(ctx: AIContext, node: Action) -> Status:
    """Join a nearby group, or found one with enough loners, then take a ring slot.

    Too few ungrouped allies to found a group means plain pursuit.
    """
    agent = ctx.agent
    groups = ctx.groups
    if agent.group_id is None:
        allies = ctx.nearby_agents(node.param("radius", COORDINATE_RADIUS))
        grouped = next((a for a in allies if a.group_id is not None), None)
        if grouped is not None:
            groups.add(agent, grouped.group_id)
        else:
            if len(allies) < ctx.config.form_group_min:
                return _pursue(ctx, 1.0)
            group = groups.create(agent)
            for ally in allies:
                groups.add(ally, group.id)
    center = ctx.target_position()
    if center is None:
        return follow_leader(ctx, node)
    slot = groups.ring_slot(agent, center)
    if slot is None:
        return Status.FAILURE
    ctx.move_to(slot)
    return Status.RUNNING


def coordinate_group_attack(ctx: AIContext, node: Action) -> Status:
    """Leader spreads every member around the shared target at 2*pi/n spacing."""
    agent = ctx.agent
    group = ctx.groups.get(agent.group_id)
    center = ctx.target_position()
    if group is None or center is None:
        return Status.FAILURE
    group.target_id = agent.target_id
    slots = ctx.groups.assign_ring(group, center, node.param("radius"))
    for member_id, slot in slots.items():
        member = ctx.agents.get(member_id)
        if member is None:
            continue
        member.blackboard["formation_goal"] = slot
        if member.target_id is None:
            member.target_id = agent.target_id
    ctx.move_to(slots[agent.id])
    return Status.SUCCESS


def follow_leader(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    leader_id = ctx.groups.leader_of(agent)
    leader = ctx.agents.get(leader_id) if leader_id is not None else None
    if leader is None:
        return Status.FAILURE
    group = ctx.groups.get(agent.group_id)
    formation = agent.blackboard.get("formation_goal")
    if formation is not None and group is not None and group.target_id is not None:
        ctx.move_to(formation)
        return Status.RUNNING
    index = group.members.index(agent.id) if group is not None else 1
    count = max(1, group.size if group is not None else 1)
    offset = Vector2.from_angle(2.0 * math.pi * index / count, node.param("distance", FOLLOW_DISTANCE))
    ctx.move_to(leader.pos + offset)
    return Status.RUNNING


def form_group(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    cfg = ctx.config
    recruits = ctx.nearby_agents(node.param("radius", cfg.form_group_radius), ungrouped_only=True)
    if agent.group_id is not None or len(recruits) < cfg.form_group_min:
        return Status.FAILURE
    group = ctx.groups.create(agent)
    for other in recruits:
        ctx.groups.add(other, group.id)
    logger.debug("Agent #%d formed group %d with %d members", agent.id, group.id, group.size)
    return Status.SUCCESS


def join_group(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    leader_id = agent.blackboard.pop("nearby_leader", None)
    leader = ctx.agents.get(leader_id) if leader_id is not None else None
    if leader is None or leader.group_id is None:
        return Status.FAILURE
    ctx.groups.add(agent, leader.group_id)
    return Status.SUCCESS


def seek_others(ctx: AIContext, node: Action) -> Status:
    agent = ctx.agent
    best = None
    best_distance = math.inf
    for other in ctx.agents.values():
        if other.id == agent.id or not other.alive or other.group_id is not None:
            continue
        d = agent.pos.distance(other.pos)
        if d < best_distance:
            best, best_distance = other, d
    if best is None:
        return Status.FAILURE
    ctx.move_to(best.pos)
    return Status.RUNNING


ACTION_HANDLERS: dict[ActionKind, ActionHandler] = {
    ActionKind.ATTACK_TARGET: attack_target,
    ActionKind.MOVE_TOWARDS_TARGET: move_towards_target,
    ActionKind.INVESTIGATE_SOUND: investigate_sound,
    ActionKind.WANDER: wander,
    ActionKind.SPRINT_TOWARDS_TARGET: sprint_towards_target,
    ActionKind.FLANK_TARGET: flank_target,
    ActionKind.COORDINATE_WITH_GROUP: coordinate_with_group,
    ActionKind.PATROL: patrol,
    ActionKind.CHARGE_TARGET: charge_target,
    ActionKind.BREAK_OBSTACLE: break_obstacle,
    ActionKind.ROAR: roar,
    ActionKind.GUARD_AREA: guard_area,
    ActionKind.SPIT_AT_TARGET: spit_at_target,
    ActionKind.RETREAT_FROM_TARGET: retreat_from_target,
    ActionKind.FIND_VANTAGE_POINT: find_vantage_point,
    ActionKind.SEEK_HIGH_GROUND: seek_high_ground,
    ActionKind.COORDINATE_GROUP_ATTACK: coordinate_group_attack,
    ActionKind.FOLLOW_LEADER: follow_leader,
    ActionKind.FORM_GROUP: form_group,
    ActionKind.JOIN_GROUP: join_group,
    ActionKind.SEEK_OTHERS: seek_others,
}
