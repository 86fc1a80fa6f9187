"""Player performance tracking.

Turns raw per-tick gameplay signals into a single effectiveness score in
[0, 1].  Four sub-scores are blended:

    combat 30%:   accuracy, kills, best combo
    movement 20%: average speed, distance travelled, time stuck
    survival 30%: health, survival time, resource efficiency
    skill 20%:    reaction time, decision quality, adaptability

A snapshot is recorded once per ``snapshot_interval`` into a bounded
history; the published score is the mean of the last ten snapshots
(0.5 before the first one).  All times are seconds.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from horde.config import AIConfig
    from horde.core.models import Vector2

logger = logging.getLogger(__name__)

WEIGHTS = {"combat": 0.3, "movement": 0.2, "survival": 0.3, "skill": 0.2}
SCORE_WINDOW = 10
DEFAULT_SCORE = 0.5

# Normalisation ceilings
KILLS_CAP = 50.0
COMBO_CAP = 10.0
SPEED_CAP = 30.0
DISTANCE_CAP = 1000.0
STUCK_CAP = 10.0
SURVIVAL_CAP = 60.0
REACTION_CAP = 2.0


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(slots=True)
class PerformanceSignals:
    """Gameplay observations for one tick; None means "not reported"."""

    game_time: float | None = None
    shots_fired: int | None = None
    shots_hit: int | None = None
    kills: int | None = None
    combo: int | None = None
    damage_dealt: float | None = None
    damage_taken: float | None = None
    vehicle_speed: float | None = None
    vehicle_position: Vector2 | None = None
    health_percentage: float | None = None     # 0..100
    objectives_completed: int | None = None
    active_threats: int | None = None
    collisions: int | None = None


@dataclass(slots=True)
class PerformanceMetrics:
    """Running metrics derived from the signal stream."""

    kills: int = 0
    hit_accuracy: float = 0.0
    best_combo: int = 0
    damage_dealt: float = 0.0
    damage_taken: float = 0.0
    average_speed: float = 0.0
    distance_travelled: float = 0.0
    time_stuck: float = 0.0
    collisions: int = 0
    health_percentage: float = 100.0
    survival_time: float = 0.0
    objectives_completed: int = 0
    resource_efficiency: float = 1.0
    reaction_time: float = 0.0
    decision_quality: float = 0.0
    adaptability: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class PerformanceSnapshot:
    timestamp: float
    combat: float
    movement: float
    survival: float
    skill: float
    overall: float


class PerformanceTracker:
    """Accumulates signals and records one composite snapshot per interval."""

    def __init__(self, config: AIConfig) -> None:
        self._config = config
        self.metrics = PerformanceMetrics()
        self.history: deque[PerformanceSnapshot] = deque(maxlen=config.performance_history_size)
        self._shots = 0
        self._hits = 0
        self._speed_samples: deque[float] = deque(maxlen=config.speed_window)
        self._last_position: Vector2 | None = None
        self._slow_for = 0.0
        self._last_health = 100.0
        self._last_snapshot_at: float | None = None

    # -- ingestion --

    def update(self, dt: float, now: float, signals: PerformanceSignals | None) -> PerformanceSnapshot | None:
        """Ingest one tick of signals; return the snapshot if one was recorded."""
        if signals is not None:
            self._update_combat(signals)
            self._update_movement(dt, signals)
            self._update_survival(signals)
            self._update_skill(signals)

        if self._last_snapshot_at is None:
            self._last_snapshot_at = now
        if now - self._last_snapshot_at >= self._config.snapshot_interval:
            self._last_snapshot_at = now
            return self.record_snapshot(now)
        return None

    def _update_combat(self, s: PerformanceSignals) -> None:
        m = self.metrics
        if s.kills is not None:
            m.kills = max(m.kills, s.kills)
        if s.shots_fired is not None:
            self._shots = max(self._shots, s.shots_fired)
        if s.shots_hit is not None:
            self._hits = max(self._hits, s.shots_hit)
        if s.shots_fired is not None or s.shots_hit is not None:
            m.hit_accuracy = _clamp01(self._hits / self._shots) if self._shots > 0 else 0.0
        if s.combo is not None:
            m.best_combo = max(m.best_combo, s.combo)
        if s.damage_dealt is not None:
            m.damage_dealt = max(0.0, s.damage_dealt)
        if s.damage_taken is not None:
            m.damage_taken = max(0.0, s.damage_taken)

    def _update_movement(self, dt: float, s: PerformanceSignals) -> None:
        m = self.metrics
        if s.vehicle_speed is not None:
            speed = max(0.0, s.vehicle_speed)
            self._speed_samples.append(speed)
            m.average_speed = sum(self._speed_samples) / len(self._speed_samples)
            if speed < self._config.stuck_speed:
                self._slow_for += dt
            else:
                self._slow_for = 0.0
            if self._slow_for > self._config.stuck_grace:
                m.time_stuck += dt
        if s.vehicle_position is not None:
            if self._last_position is not None:
                m.distance_travelled += self._last_position.distance(s.vehicle_position)
            self._last_position = s.vehicle_position
        if s.collisions is not None:
            m.collisions = max(m.collisions, s.collisions)

    def _update_survival(self, s: PerformanceSignals) -> None:
        m = self.metrics
        if s.health_percentage is not None:
            health = max(0.0, min(100.0, s.health_percentage))
            m.health_percentage = health
            loss = self._last_health - health
            if loss > 0:
                m.resource_efficiency = max(0.0, m.resource_efficiency - (loss / 100.0) * 0.1)
            self._last_health = health
        if s.game_time is not None:
            m.survival_time = max(0.0, s.game_time)
        if s.objectives_completed is not None:
            m.objectives_completed = s.objectives_completed

    def _update_skill(self, s: PerformanceSignals) -> None:
        m = self.metrics
        if s.active_threats:
            m.reaction_time = max(0.0, 1.0 - m.hit_accuracy * 0.5)
        m.decision_quality = self._decision_quality()
        m.adaptability = self._adaptability()

    def _decision_quality(self) -> float:
        m = self.metrics
        quality = 0.5 + (m.health_percentage / 100.0) * 0.2
        if m.average_speed > 10.0:
            quality += 0.1
        if m.time_stuck > 5.0:
            quality -= 0.2
        if m.hit_accuracy > 0.7:
            quality += 0.2
        return _clamp01(quality)

    def _adaptability(self) -> float:
        if len(self.history) < 5:
            return 0.5
        recent = [snap.overall for snap in list(self.history)[-SCORE_WINDOW:]]
        mean = sum(recent) / len(recent)
        variance = sum((x - mean) ** 2 for x in recent) / len(recent)
        return _clamp01(1.0 - variance)

    # -- scoring --

    def combat_score(self) -> float:
        m = self.metrics
        return _clamp01(
            m.hit_accuracy * 0.4
            + min(m.kills / KILLS_CAP, 1.0) * 0.3
            + min(m.best_combo / COMBO_CAP, 1.0) * 0.3
        )

    def movement_score(self) -> float:
        m = self.metrics
        return _clamp01(
            min(m.average_speed / SPEED_CAP, 1.0) * 0.4
            + min(m.distance_travelled / DISTANCE_CAP, 1.0) * 0.3
            + max(0.0, 1.0 - m.time_stuck / STUCK_CAP) * 0.3
        )

    def survival_score(self) -> float:
        m = self.metrics
        return _clamp01(
            m.health_percentage / 100.0 * 0.4
            + min(m.survival_time / SURVIVAL_CAP, 1.0) * 0.3
            + m.resource_efficiency * 0.3
        )

    def skill_score(self) -> float:
        m = self.metrics
        return _clamp01(
            max(0.0, 1.0 - m.reaction_time / REACTION_CAP) * 0.4
            + m.decision_quality * 0.3
            + m.adaptability * 0.3
        )

    def record_snapshot(self, now: float) -> PerformanceSnapshot:
        combat = self.combat_score()
        movement = self.movement_score()
        survival = self.survival_score()
        skill = self.skill_score()
        overall = (
            combat * WEIGHTS["combat"]
            + movement * WEIGHTS["movement"]
            + survival * WEIGHTS["survival"]
            + skill * WEIGHTS["skill"]
        )
        snap = PerformanceSnapshot(now, combat, movement, survival, skill, overall)
        self.history.append(snap)
        logger.debug("Performance snapshot at %.1fs: %.3f", now, overall)
        return snap

    @property
    def score(self) -> float:
        """Mean of the most recent snapshots, or 0.5 with no history."""
        if not self.history:
            return DEFAULT_SCORE
        recent = list(self.history)[-SCORE_WINDOW:]
        return sum(s.overall for s in recent) / len(recent)

    def breakdown(self) -> dict[str, float]:
        return {
            "combat": self.combat_score(),
            "movement": self.movement_score(),
            "survival": self.survival_score(),
            "skill": self.skill_score(),
        }

    def reset(self) -> None:
        self.metrics = PerformanceMetrics()
        self.history.clear()
        self._shots = self._hits = 0
        self._speed_samples.clear()
        self._last_position = None
        self._slow_for = 0.0
        self._last_health = 100.0
        self._last_snapshot_at = None
