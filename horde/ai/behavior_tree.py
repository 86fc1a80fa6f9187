"""Behavior-tree node types, construction and traversal.

Trees are immutable and shared by every agent of an archetype.  All
per-agent memory lives on the agent (cursor and blackboard), so one tree
instance can be evaluated for a hundred agents in the same tick.

Node variants are a closed set: Selector, Sequence, Condition, Action.
Condition and action names are closed enumerations too; ``build_tree``
rejects unknown names when a tree is constructed, never mid-game.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Mapping, Union

if TYPE_CHECKING:
    from horde.ai.context import AIContext

logger = logging.getLogger(__name__)


class Status(Enum):
    """Result of evaluating a BT node."""

    SUCCESS = "success"
    FAILURE = "failure"
    RUNNING = "running"


class UnknownNodeError(ValueError):
    """Raised when a tree description names a node, condition or action that does not exist."""


class ConditionKind(str, Enum):
    TARGET_IN_RANGE = "target_in_range"
    TARGET_TOO_CLOSE = "target_too_close"
    HAS_LINE_OF_SIGHT = "has_line_of_sight"
    CAN_SENSE_TARGET = "can_sense_target"
    HEARD_SOUND = "heard_sound"
    TARGET_STATIONARY = "target_stationary"
    CAN_FLANK = "can_flank"
    HAS_NEARBY_ALLIES = "has_nearby_allies"
    CHARGE_OPPORTUNITY = "charge_opportunity"
    OBSTACLE_IN_PATH = "obstacle_in_path"
    ABILITY_READY = "ability_ready"
    ATTACK_READY = "attack_ready"
    IS_GROUP_LEADER = "is_group_leader"
    HAS_GROUP_MEMBERS = "has_group_members"
    HAS_GROUP_LEADER = "has_group_leader"
    UNGROUPED_NEARBY = "ungrouped_nearby"
    LEADER_NEARBY = "leader_nearby"


class ActionKind(str, Enum):
    ATTACK_TARGET = "attack_target"
    MOVE_TOWARDS_TARGET = "move_towards_target"
    INVESTIGATE_SOUND = "investigate_sound"
    WANDER = "wander"
    SPRINT_TOWARDS_TARGET = "sprint_towards_target"
    FLANK_TARGET = "flank_target"
    COORDINATE_WITH_GROUP = "coordinate_with_group"
    PATROL = "patrol"
    CHARGE_TARGET = "charge_target"
    BREAK_OBSTACLE = "break_obstacle"
    ROAR = "roar"
    GUARD_AREA = "guard_area"
    SPIT_AT_TARGET = "spit_at_target"
    RETREAT_FROM_TARGET = "retreat_from_target"
    FIND_VANTAGE_POINT = "find_vantage_point"
    SEEK_HIGH_GROUND = "seek_high_ground"
    COORDINATE_GROUP_ATTACK = "coordinate_group_attack"
    FOLLOW_LEADER = "follow_leader"
    FORM_GROUP = "form_group"
    JOIN_GROUP = "join_group"
    SEEK_OTHERS = "seek_others"


# --- Leaf nodes ---


@dataclass(frozen=True, slots=True)
class Condition:
    """Leaf: named predicate -> SUCCESS or FAILURE."""

    kind: ConditionKind
    params: tuple[tuple[str, Any], ...] = ()

    @property
    def name(self) -> str:
        return self.kind.value

    def param(self, key: str, default: Any = None) -> Any:
        for k, v in self.params:
            if k == key:
                return v
        return default


@dataclass(frozen=True, slots=True)
class Action:
    """Leaf: side-effecting behavior -> SUCCESS, RUNNING or FAILURE."""

    kind: ActionKind
    params: tuple[tuple[str, Any], ...] = ()

    @property
    def name(self) -> str:
        return self.kind.value

    def param(self, key: str, default: Any = None) -> Any:
        for k, v in self.params:
            if k == key:
                return v
        return default


# --- Composite nodes ---


@dataclass(frozen=True, slots=True)
class Sequence:
    """All children must succeed; fails on first failure."""

    children: tuple[Node, ...] = field(default_factory=tuple)
    name: str = "sequence"


@dataclass(frozen=True, slots=True)
class Selector:
    """First child that does not fail wins; fallback chain."""

    children: tuple[Node, ...] = field(default_factory=tuple)
    name: str = "selector"


Node = Union[Selector, Sequence, Condition, Action]


@dataclass(frozen=True, slots=True)
class BehaviorTree:
    name: str
    root: Node


# ---------------------------------------------------------------------------
# Construction from declarative descriptions
# ---------------------------------------------------------------------------

def build_node(desc: Mapping[str, Any]) -> Node:
    """Build one node from a mapping description.

    Accepted shapes::

        {"selector": [child, ...], "name": "optional"}
        {"sequence": [child, ...], "name": "optional"}
        {"condition": "target_in_range", "range": 25.0}
        {"action": "attack_target"}

    Extra keys on leaves become node parameters.
    """
    if not isinstance(desc, Mapping):
        raise UnknownNodeError(f"node description must be a mapping, got {type(desc).__name__}")

    if "selector" in desc or "sequence" in desc:
        is_selector = "selector" in desc
        raw_children = desc["selector" if is_selector else "sequence"]
        children = tuple(build_node(c) for c in raw_children)
        if not children:
            raise UnknownNodeError("composite node needs at least one child")
        cls = Selector if is_selector else Sequence
        return cls(children=children, name=desc.get("name", cls.__name__.lower()))

    if "condition" in desc:
        try:
            kind = ConditionKind(desc["condition"])
        except ValueError:
            raise UnknownNodeError(f"unknown condition '{desc['condition']}'") from None
        return Condition(kind, _params(desc, "condition"))

    if "action" in desc:
        try:
            akind = ActionKind(desc["action"])
        except ValueError:
            raise UnknownNodeError(f"unknown action '{desc['action']}'") from None
        return Action(akind, _params(desc, "action"))

    raise UnknownNodeError(f"unknown node type in {dict(desc)!r}")


def _params(desc: Mapping[str, Any], skip: str) -> tuple[tuple[str, Any], ...]:
    return tuple(sorted((k, v) for k, v in desc.items() if k != skip))


def build_tree(name: str, desc: Mapping[str, Any]) -> BehaviorTree:
    return BehaviorTree(name=name, root=build_node(desc))


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------

ConditionHandler = Callable[["AIContext", Condition], bool]
ActionHandler = Callable[["AIContext", Action], Status]


class BehaviorTreeEvaluator:
    """Interprets trees against per-agent context.

    Handlers are looked up by kind.  A kind without a handler resolves to
    FAILURE and is reported once; it never stops other agents from being
    processed.
    """

    __slots__ = ("_conditions", "_actions", "_reported_missing")

    def __init__(
        self,
        conditions: Mapping[ConditionKind, ConditionHandler],
        actions: Mapping[ActionKind, ActionHandler],
    ) -> None:
        self._conditions = dict(conditions)
        self._actions = dict(actions)
        self._reported_missing: set[str] = set()

    def evaluate(self, tree: BehaviorTree, ctx: AIContext) -> Status:
        """Run one full pass from the root and update the agent's cursor."""
        agent = ctx.agent
        try:
            status, running = self._eval(tree.root, ctx)
        except Exception:
            logger.exception("Behavior tree '%s' failed for agent #%d", tree.name, agent.id)
            status, running = Status.FAILURE, None

        if status == Status.RUNNING and running is not None:
            agent.cursor = running
        else:
            agent.cursor = "root"
        return status

    def _eval(self, node: Node, ctx: AIContext) -> tuple[Status, str | None]:
        if isinstance(node, Condition):
            return self._eval_condition(node, ctx), None
        if isinstance(node, Action):
            status = self._eval_action(node, ctx)
            return status, node.name if status == Status.RUNNING else None
        if isinstance(node, Sequence):
            for child in node.children:
                status, running = self._eval(child, ctx)
                if status != Status.SUCCESS:
                    return status, running
            return Status.SUCCESS, None
        if isinstance(node, Selector):
            for child in node.children:
                status, running = self._eval(child, ctx)
                if status != Status.FAILURE:
                    return status, running
            return Status.FAILURE, None
        self._report_missing(type(node).__name__)
        return Status.FAILURE, None

    def _eval_condition(self, node: Condition, ctx: AIContext) -> Status:
        handler = self._conditions.get(node.kind)
        if handler is None:
            self._report_missing(node.name)
            return Status.FAILURE
        return Status.SUCCESS if handler(ctx, node) else Status.FAILURE

    def _eval_action(self, node: Action, ctx: AIContext) -> Status:
        handler = self._actions.get(node.kind)
        if handler is None:
            self._report_missing(node.name)
            return Status.FAILURE
        return handler(ctx, node)

    def _report_missing(self, name: str) -> None:
        if name not in self._reported_missing:
            self._reported_missing.add(name)
            logger.warning("No handler registered for node '%s'; treating as FAILURE", name)
