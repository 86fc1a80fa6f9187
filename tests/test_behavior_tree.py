"""Tests for behavior-tree construction and traversal."""

import sys
import os
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from horde.ai.actions import ACTION_HANDLERS
from horde.ai.behavior_tree import (
    ActionKind,
    BehaviorTreeEvaluator,
    ConditionKind,
    Selector,
    Sequence,
    Status,
    UnknownNodeError,
    build_tree,
)
from horde.ai.conditions import CONDITION_HANDLERS
from horde.ai.trees import TREES, get_tree
from horde.core.archetypes import ARCHETYPES
from horde.core.models import Agent, Vector2


def _make_ctx():
    agent = Agent(id=1, archetype="basic", pos=Vector2(), health=100, max_health=100, damage=10, speed=10)
    return SimpleNamespace(agent=agent)


def _attack_or_wander():
    return build_tree("test", {
        "selector": [
            {"sequence": [
                {"condition": "target_in_range", "range": 30.0},
                {"action": "attack_target"},
            ]},
            {"action": "wander"},
        ],
    })


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestBuildTree:
    def test_composites_and_params(self):
        tree = _attack_or_wander()
        assert isinstance(tree.root, Selector)
        seq = tree.root.children[0]
        assert isinstance(seq, Sequence)
        cond = seq.children[0]
        assert cond.kind == ConditionKind.TARGET_IN_RANGE
        assert cond.param("range") == 30.0
        assert cond.param("missing", 7) == 7

    def test_unknown_condition_rejected(self):
        with pytest.raises(UnknownNodeError, match="unknown condition"):
            build_tree("bad", {"condition": "can_teleport"})

    def test_unknown_action_rejected(self):
        with pytest.raises(UnknownNodeError, match="unknown action"):
            build_tree("bad", {"selector": [{"action": "explode"}]})

    def test_unknown_node_type_rejected(self):
        with pytest.raises(UnknownNodeError):
            build_tree("bad", {"parallel": []})

    def test_empty_composite_rejected(self):
        with pytest.raises(UnknownNodeError):
            build_tree("bad", {"sequence": []})

    def test_every_archetype_tree_exists(self):
        for arch in ARCHETYPES.values():
            assert get_tree(arch.tree).name == arch.tree

    def test_unknown_tree_name(self):
        with pytest.raises(KeyError):
            get_tree("nope")

    def test_every_node_kind_has_a_handler(self):
        assert set(CONDITION_HANDLERS) == set(ConditionKind)
        assert set(ACTION_HANDLERS) == set(ActionKind)

    def test_builtin_trees_end_in_unconditional_fallback(self):
        for tree in TREES.values():
            assert isinstance(tree.root, Selector)
            assert not isinstance(tree.root.children[-1], Sequence)


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------

class TestEvaluator:
    def _evaluator(self, in_range: bool, attack: Status, wander: Status = Status.RUNNING):
        cond = MagicMock(return_value=in_range)
        attack_fn = MagicMock(return_value=attack)
        wander_fn = MagicMock(return_value=wander)
        ev = BehaviorTreeEvaluator(
            {ConditionKind.TARGET_IN_RANGE: cond},
            {ActionKind.ATTACK_TARGET: attack_fn, ActionKind.WANDER: wander_fn},
        )
        return ev, cond, attack_fn, wander_fn

    def test_selector_stops_at_first_success(self):
        ev, cond, attack_fn, wander_fn = self._evaluator(True, Status.SUCCESS)
        ctx = _make_ctx()
        assert ev.evaluate(_attack_or_wander(), ctx) == Status.SUCCESS
        assert cond.call_count == 1
        assert attack_fn.call_count == 1
        assert wander_fn.call_count == 0
        assert ctx.agent.cursor == "root"

    def test_sequence_fails_on_first_failure(self):
        ev, cond, attack_fn, wander_fn = self._evaluator(False, Status.SUCCESS)
        ctx = _make_ctx()
        assert ev.evaluate(_attack_or_wander(), ctx) == Status.RUNNING
        assert attack_fn.call_count == 0
        assert wander_fn.call_count == 1
        assert ctx.agent.cursor == "wander"

    def test_running_child_halts_sequence_and_sets_cursor(self):
        ev, _, attack_fn, wander_fn = self._evaluator(True, Status.RUNNING)
        ctx = _make_ctx()
        assert ev.evaluate(_attack_or_wander(), ctx) == Status.RUNNING
        assert ctx.agent.cursor == "attack_target"
        assert wander_fn.call_count == 0

    def test_full_pass_every_time(self):
        ev, cond, _, _ = self._evaluator(True, Status.RUNNING)
        ctx = _make_ctx()
        tree = _attack_or_wander()
        ev.evaluate(tree, ctx)
        ev.evaluate(tree, ctx)
        # Re-evaluated from the root, so the guard runs again.
        assert cond.call_count == 2

    def test_missing_handler_is_failure(self):
        ev = BehaviorTreeEvaluator({}, {ActionKind.WANDER: MagicMock(return_value=Status.SUCCESS)})
        assert ev.evaluate(_attack_or_wander(), _make_ctx()) == Status.SUCCESS

    def test_all_children_fail(self):
        ev, _, _, _ = self._evaluator(False, Status.SUCCESS, wander=Status.FAILURE)
        ctx = _make_ctx()
        assert ev.evaluate(_attack_or_wander(), ctx) == Status.FAILURE
        assert ctx.agent.cursor == "root"

    def test_handler_exception_becomes_failure(self):
        boom = MagicMock(side_effect=RuntimeError("boom"))
        ev = BehaviorTreeEvaluator({ConditionKind.TARGET_IN_RANGE: boom}, {})
        ctx = _make_ctx()
        ctx.agent.cursor = "stale"
        assert ev.evaluate(_attack_or_wander(), ctx) == Status.FAILURE
        assert ctx.agent.cursor == "root"
