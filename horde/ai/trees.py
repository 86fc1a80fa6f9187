"""Declarative behavior trees, one per archetype family.

Each tree is a priority-ordered selector of sequences; the last child is
an unconditional fallback so a pass always produces some behavior.  The
descriptions are built into immutable trees once at import, which is
where an unknown condition or action name would be rejected.
"""

from __future__ import annotations

from typing import Any

from horde.ai.behavior_tree import BehaviorTree, build_tree

TREE_SPECS: dict[str, dict[str, Any]] = {
    "basic": {
        "selector": [
            {"sequence": [
                {"condition": "target_in_range", "range": 30.0},
                {"condition": "has_line_of_sight"},
                {"action": "attack_target"},
            ], "name": "attack"},
            {"sequence": [
                {"condition": "can_sense_target", "range": 100.0},
                {"action": "move_towards_target"},
            ], "name": "chase"},
            {"sequence": [
                {"condition": "heard_sound"},
                {"action": "investigate_sound"},
            ], "name": "investigate"},
            {"action": "wander"},
        ],
    },
    "runner": {
        "selector": [
            {"sequence": [
                {"condition": "target_in_range"},
                {"action": "attack_target"},
            ], "name": "attack"},
            {"sequence": [
                {"condition": "target_in_range", "range": 150.0},
                {"condition": "has_line_of_sight"},
                {"action": "sprint_towards_target"},
            ], "name": "sprint"},
            {"sequence": [
                {"condition": "target_stationary"},
                {"condition": "can_flank"},
                {"action": "flank_target"},
            ], "name": "flank"},
            {"sequence": [
                {"condition": "has_nearby_allies"},
                {"action": "coordinate_with_group"},
            ], "name": "pack"},
            {"sequence": [
                {"condition": "can_sense_target"},
                {"action": "move_towards_target"},
            ], "name": "chase"},
            {"action": "patrol"},
        ],
    },
    "brute": {
        "selector": [
            {"sequence": [
                {"condition": "target_in_range"},
                {"action": "attack_target"},
            ], "name": "attack"},
            {"sequence": [
                {"condition": "target_in_range", "range": 200.0},
                {"condition": "charge_opportunity"},
                {"action": "charge_target"},
            ], "name": "charge"},
            {"sequence": [
                {"condition": "obstacle_in_path"},
                {"action": "break_obstacle"},
            ], "name": "smash"},
            {"sequence": [
                {"condition": "target_in_range", "range": 80.0},
                {"action": "roar"},
            ], "name": "intimidate"},
            {"sequence": [
                {"condition": "can_sense_target"},
                {"action": "move_towards_target"},
            ], "name": "chase"},
            {"action": "guard_area"},
        ],
    },
    "spitter": {
        "selector": [
            {"sequence": [
                {"condition": "target_in_range", "range": 120.0},
                {"condition": "has_line_of_sight"},
                {"condition": "ability_ready", "ability": "acid_spit"},
                {"action": "spit_at_target"},
            ], "name": "spit"},
            {"sequence": [
                {"condition": "target_too_close", "range": 40.0},
                {"action": "retreat_from_target"},
            ], "name": "retreat"},
            {"sequence": [
                {"condition": "can_sense_target", "range": 200.0},
                {"action": "find_vantage_point"},
            ], "name": "vantage"},
            {"action": "seek_high_ground"},
        ],
    },
    "swarm": {
        "selector": [
            {"sequence": [
                {"condition": "target_in_range"},
                {"condition": "attack_ready"},
                {"action": "attack_target"},
            ], "name": "attack"},
            {"sequence": [
                {"condition": "is_group_leader"},
                {"condition": "has_group_members"},
                {"condition": "can_sense_target"},
                {"action": "coordinate_group_attack"},
            ], "name": "lead"},
            {"sequence": [
                {"condition": "has_group_leader"},
                {"action": "follow_leader"},
            ], "name": "follow"},
            {"sequence": [
                {"condition": "leader_nearby"},
                {"action": "join_group"},
            ], "name": "join"},
            {"sequence": [
                {"condition": "ungrouped_nearby"},
                {"action": "form_group"},
            ], "name": "form"},
            {"sequence": [
                {"condition": "can_sense_target"},
                {"action": "move_towards_target"},
            ], "name": "chase"},
            {"action": "seek_others"},
        ],
    },
}


TREES: dict[str, BehaviorTree] = {name: build_tree(name, spec) for name, spec in TREE_SPECS.items()}


def get_tree(name: str) -> BehaviorTree:
    try:
        return TREES[name]
    except KeyError:
        raise KeyError(f"unknown behavior tree '{name}'") from None
