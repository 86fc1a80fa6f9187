"""Condition handlers: named predicates evaluated against one agent's context.

Every handler has the signature ``(ctx, node) -> bool``.  Range-style
conditions read an optional ``range`` parameter from the node and fall
back to the archetype's own stat when it is absent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from horde.ai.behavior_tree import ConditionKind

if TYPE_CHECKING:
    from horde.ai.behavior_tree import Condition, ConditionHandler
    from horde.ai.context import AIContext

STATIONARY_SPEED = 1.0
FLANK_CHANCE = 0.3
ALLY_RADIUS = 50.0
ALLY_MIN = 2
CHARGE_MIN_DISTANCE = 50.0
CHARGE_MAX_DISTANCE = 200.0
TOO_CLOSE_RANGE = 40.0


# -- target geometry --

def target_in_range(ctx: AIContext, node: Condition) -> bool:
    distance = ctx.target_distance()
    if distance is None:
        return False
    return distance <= node.param("range", ctx.archetype.attack_range)


def target_too_close(ctx: AIContext, node: Condition) -> bool:
    distance = ctx.target_distance()
    return distance is not None and distance <= node.param("range", TOO_CLOSE_RANGE)


def has_line_of_sight(ctx: AIContext, node: Condition) -> bool:
    target = ctx.target()
    if target is None:
        return False
    return ctx.world.has_line_of_sight(ctx.agent.pos, target.pos)


def can_sense_target(ctx: AIContext, node: Condition) -> bool:
    """Sense range grows with alert and intelligence; acquires what it senses."""
    agent = ctx.agent
    base = node.param("range", ctx.archetype.detection_range)
    reach = base * (1.0 + agent.alert) * ctx.archetype.intelligence_factor
    target = ctx.target()
    if target is not None:
        return agent.pos.distance(target.pos) <= reach
    nearby = ctx.world.get_nearby_targets(agent.pos, reach)
    if not nearby:
        return False
    agent.target_id = nearby[0].id
    return True


def target_stationary(ctx: AIContext, node: Condition) -> bool:
    target = ctx.target()
    if target is None:
        return False
    return target.velocity.length() < node.param("speed", STATIONARY_SPEED)


def can_flank(ctx: AIContext, node: Condition) -> bool:
    if ctx.target() is None:
        return False
    return ctx.rng.chance(node.param("chance", FLANK_CHANCE))


def charge_opportunity(ctx: AIContext, node: Condition) -> bool:
    target = ctx.target()
    if target is None:
        return False
    distance = ctx.agent.pos.distance(target.pos)
    if not CHARGE_MIN_DISTANCE < distance < node.param("range", CHARGE_MAX_DISTANCE):
        return False
    return ctx.world.has_line_of_sight(ctx.agent.pos, target.pos)


# -- blackboard flags --

def heard_sound(ctx: AIContext, node: Condition) -> bool:
    return ctx.agent.blackboard.get("sound_position") is not None


def obstacle_in_path(ctx: AIContext, node: Condition) -> bool:
    return bool(ctx.agent.blackboard.get("obstacle_detected"))


# -- cooldowns --

def ability_ready(ctx: AIContext, node: Condition) -> bool:
    name = node.param("ability")
    if name is None or name not in ctx.archetype.abilities:
        return False
    return ctx.agent.ability_ready(name)


def attack_ready(ctx: AIContext, node: Condition) -> bool:
    return ctx.agent.attack_cooldown <= 0.0


# -- allies and groups --

def has_nearby_allies(ctx: AIContext, node: Condition) -> bool:
    allies = ctx.nearby_agents(node.param("radius", ALLY_RADIUS))
    return len(allies) >= node.param("count", ALLY_MIN)


def is_group_leader(ctx: AIContext, node: Condition) -> bool:
    return ctx.groups.is_leader(ctx.agent)


def has_group_members(ctx: AIContext, node: Condition) -> bool:
    group = ctx.groups.get(ctx.agent.group_id)
    return group is not None and group.size > 1


def has_group_leader(ctx: AIContext, node: Condition) -> bool:
    return ctx.groups.leader_of(ctx.agent) is not None


def ungrouped_nearby(ctx: AIContext, node: Condition) -> bool:
    if ctx.agent.group_id is not None:
        return False
    cfg = ctx.config
    others = ctx.nearby_agents(node.param("radius", cfg.form_group_radius), ungrouped_only=True)
    return len(others) >= node.param("count", cfg.form_group_min)


def leader_nearby(ctx: AIContext, node: Condition) -> bool:
    if ctx.agent.group_id is not None:
        return False
    for other in ctx.nearby_agents(node.param("radius", ctx.config.group_radius)):
        if ctx.groups.is_leader(other):
            ctx.agent.blackboard["nearby_leader"] = other.id
            return True
    return False


CONDITION_HANDLERS: dict[ConditionKind, ConditionHandler] = {
    ConditionKind.TARGET_IN_RANGE: target_in_range,
    ConditionKind.TARGET_TOO_CLOSE: target_too_close,
    ConditionKind.HAS_LINE_OF_SIGHT: has_line_of_sight,
    ConditionKind.CAN_SENSE_TARGET: can_sense_target,
    ConditionKind.HEARD_SOUND: heard_sound,
    ConditionKind.TARGET_STATIONARY: target_stationary,
    ConditionKind.CAN_FLANK: can_flank,
    ConditionKind.HAS_NEARBY_ALLIES: has_nearby_allies,
    ConditionKind.CHARGE_OPPORTUNITY: charge_opportunity,
    ConditionKind.OBSTACLE_IN_PATH: obstacle_in_path,
    ConditionKind.ABILITY_READY: ability_ready,
    ConditionKind.ATTACK_READY: attack_ready,
    ConditionKind.IS_GROUP_LEADER: is_group_leader,
    ConditionKind.HAS_GROUP_MEMBERS: has_group_members,
    ConditionKind.HAS_GROUP_LEADER: has_group_leader,
    ConditionKind.UNGROUPED_NEARBY: ungrouped_nearby,
    ConditionKind.LEADER_NEARBY: leader_nearby,
}
