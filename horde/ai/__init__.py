"""AI layer: behavior trees, state machine, pathfinding, and group flocking."""

from horde.ai.behavior_tree import BehaviorTree, BehaviorTreeEvaluator, Status
from horde.ai.flocking import Group, GroupCoordinator
from horde.ai.pathfinding import Pathfinder

__all__ = ["BehaviorTree", "BehaviorTreeEvaluator", "Group", "GroupCoordinator", "Pathfinder", "Status"]
