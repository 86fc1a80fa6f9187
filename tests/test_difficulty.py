"""Tests for the adaptive difficulty controller."""

import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from horde.config import AIConfig
from horde.difficulty.controller import BUCKET_REASONS, OVERRIDE_REASON, DifficultyController
from horde.difficulty.performance import PerformanceTracker


def _make_controller(**overrides) -> DifficultyController:
    cfg = AIConfig(**overrides)
    return DifficultyController(cfg, PerformanceTracker(cfg))


class TestBuckets:
    @pytest.mark.parametrize("score,bucket", [
        (1.0, "excellent"),
        (0.8, "excellent"),
        (0.79, "good"),
        (0.6, "good"),
        (0.5, "average"),
        (0.2, "poor"),
        (0.19, "very_poor"),
        (0.0, "very_poor"),
    ])
    def test_thresholds(self, score, bucket):
        assert _make_controller().bucket(score) == bucket

    def test_target_scales_current_level(self):
        ctl = _make_controller()
        assert ctl.target_for(0.9) == pytest.approx(1.2)
        assert ctl.target_for(0.5) == pytest.approx(1.0)
        assert ctl.target_for(0.1) == pytest.approx(0.8)


class TestEvaluate:
    def test_moves_rate_fraction_toward_target(self):
        ctl = _make_controller()
        record = ctl.evaluate(0.9, 5.0)
        assert ctl.level == pytest.approx(1.02)
        assert record.difficulty == ctl.level
        assert record.reason == BUCKET_REASONS["excellent"]

    def test_strong_play_raises_difficulty_each_cycle(self):
        ctl = _make_controller()
        levels = [ctl.level]
        for i in range(3):
            ctl.evaluate(0.9, 5.0 * (i + 1))
            levels.append(ctl.level)
        assert levels == sorted(levels)
        assert levels[-1] > levels[0]

    def test_average_play_holds_level(self):
        ctl = _make_controller()
        for i in range(20):
            ctl.evaluate(0.5, float(i))
        assert ctl.level == pytest.approx(1.0)

    def test_bounds_hold_under_sustained_pressure(self):
        ctl = _make_controller()
        for i in range(500):
            ctl.evaluate(1.0, float(i))
            assert ctl.level <= 3.0
        hi = ctl.level
        for i in range(500):
            ctl.evaluate(0.0, float(i))
            assert ctl.level >= 0.5
        assert ctl.level < hi

    def test_out_of_range_score_is_clamped(self):
        ctl = _make_controller()
        record = ctl.evaluate(7.0, 0.0)
        assert record.performance == 1.0

    def test_history_is_bounded(self):
        ctl = _make_controller(difficulty_history_size=3)
        for i in range(10):
            ctl.evaluate(0.5, float(i))
        assert len(ctl.history) == 3


class TestCadence:
    def test_first_update_sets_baseline(self):
        ctl = _make_controller()
        assert ctl.update(0.0) is None
        assert ctl.update(4.9) is None
        record = ctl.update(5.0)
        assert record is not None
        assert record.performance == 0.5
        assert ctl.update(7.0) is None

    def test_override_clamps_and_suspends_evaluation(self):
        ctl = _make_controller()
        ctl.update(0.0)
        record = ctl.set_override(10.0, 1.0)
        assert record.difficulty == 3.0
        assert record.reason == OVERRIDE_REASON
        assert ctl.overridden
        assert ctl.update(10.0) is None
        assert ctl.level == 3.0

    def test_clear_override_resumes_evaluation(self):
        ctl = _make_controller()
        ctl.update(0.0)
        ctl.set_override(2.0, 1.0)
        ctl.clear_override()
        assert not ctl.overridden
        assert ctl.update(5.0) is not None

    def test_reset(self):
        ctl = _make_controller(initial_difficulty=1.5)
        ctl.set_override(2.5, 0.0)
        ctl.reset()
        assert ctl.level == 1.5
        assert not ctl.overridden
        assert len(ctl.history) == 0


class TestConfigValidation:
    def test_rejects_inverted_bounds(self):
        with pytest.raises(ValueError):
            AIConfig(min_difficulty=2.0, max_difficulty=1.0)

    def test_rejects_initial_outside_bounds(self):
        with pytest.raises(ValueError):
            AIConfig(initial_difficulty=5.0)

    def test_rejects_bad_rate(self):
        with pytest.raises(ValueError):
            AIConfig(adjustment_rate=0.0)
