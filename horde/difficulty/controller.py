"""Adaptive difficulty controller.

Every ``evaluation_interval`` seconds the performance score is mapped to
one of five buckets.  Each bucket scales the current difficulty by a
multiplier to give a target, and the live level moves ``adjustment_rate``
of the way toward it.  The level is always kept inside
``[min_difficulty, max_difficulty]``.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from horde.config import AIConfig
    from horde.difficulty.performance import PerformanceTracker

logger = logging.getLogger(__name__)

BUCKET_NAMES = ("excellent", "good", "average", "poor", "very_poor")
BUCKET_REASONS = {
    "excellent": "Player performing excellently - increasing challenge",
    "good": "Player performing well - slight increase",
    "average": "Player performing adequately - maintaining difficulty",
    "poor": "Player struggling - reducing difficulty",
    "very_poor": "Player having significant difficulty - major reduction",
}
OVERRIDE_REASON = "Manual override"


@dataclass(frozen=True, slots=True)
class DifficultyRecord:
    timestamp: float
    difficulty: float
    performance: float
    reason: str

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "difficulty": self.difficulty,
            "performance": self.performance,
            "reason": self.reason,
        }


class DifficultyController:
    """Owns the live difficulty scalar and its adjustment history."""

    def __init__(self, config: AIConfig, tracker: PerformanceTracker) -> None:
        self._config = config
        self._tracker = tracker
        self._level = config.initial_difficulty
        self._override: float | None = None
        self._last_evaluation: float | None = None
        self.history: deque[DifficultyRecord] = deque(maxlen=config.difficulty_history_size)

    # -- queries --

    @property
    def level(self) -> float:
        return self._level

    @property
    def overridden(self) -> bool:
        return self._override is not None

    def clamp(self, value: float) -> float:
        return max(self._config.min_difficulty, min(self._config.max_difficulty, value))

    def bucket(self, score: float) -> str:
        """Classify a performance score into one of the five named buckets."""
        for name, floor in zip(BUCKET_NAMES, self._config.performance_thresholds):
            if score >= floor:
                return name
        return BUCKET_NAMES[-1]

    def target_for(self, score: float) -> float:
        idx = BUCKET_NAMES.index(self.bucket(score))
        return self.clamp(self._level * self._config.performance_multipliers[idx])

    # -- updates --

    def update(self, now: float) -> DifficultyRecord | None:
        """Evaluate once per interval; returns the new record when one is made."""
        if self._last_evaluation is None:
            self._last_evaluation = now
            return None
        if now - self._last_evaluation < self._config.evaluation_interval:
            return None
        self._last_evaluation = now
        if self._override is not None:
            return None
        return self.evaluate(self._tracker.score, now)

    def evaluate(self, score: float, now: float) -> DifficultyRecord:
        """Apply one adjustment step for the given performance score."""
        score = max(0.0, min(1.0, score))
        target = self.target_for(score)
        self._level = self.clamp(self._level + (target - self._level) * self._config.adjustment_rate)
        record = DifficultyRecord(now, self._level, score, BUCKET_REASONS[self.bucket(score)])
        self.history.append(record)
        logger.info("Difficulty adjusted to %.2f (performance %.2f)", self._level, score)
        return record

    def set_override(self, value: float, now: float) -> DifficultyRecord:
        """Force the level; automatic evaluation is suspended until cleared."""
        self._override = self.clamp(value)
        self._level = self._override
        record = DifficultyRecord(now, self._level, self._tracker.score, OVERRIDE_REASON)
        self.history.append(record)
        logger.info("Difficulty overridden to %.2f", self._level)
        return record

    def clear_override(self) -> None:
        if self._override is not None:
            logger.info("Difficulty override cleared at %.2f", self._level)
        self._override = None

    def reset(self) -> None:
        self._level = self._config.initial_difficulty
        self._override = None
        self._last_evaluation = None
        self.history.clear()
