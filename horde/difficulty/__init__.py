"""Player performance tracking, difficulty control and spawn direction."""

from horde.difficulty.controller import DifficultyController, DifficultyRecord
from horde.difficulty.performance import PerformanceSignals, PerformanceTracker
from horde.difficulty.spawning import SpawnPatternSelector, SpawnRequest

__all__ = [
    "DifficultyController",
    "DifficultyRecord",
    "PerformanceSignals",
    "PerformanceTracker",
    "SpawnPatternSelector",
    "SpawnRequest",
]
