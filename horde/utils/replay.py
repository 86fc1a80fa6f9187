"""Replay recording: per-tick agent states and emitted events as JSON.

Two runs with the same seed and tick deltas produce identical replays,
which makes the file a cheap determinism check as well as a debugging aid.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

if TYPE_CHECKING:
    from horde.core.models import Agent
    from horde.engine.events import AIEvent

logger = logging.getLogger(__name__)


class ReplayRecorder:
    """Accumulates tick records and flushes them to a JSON replay file."""

    __slots__ = ("_path", "_ticks", "_seed")

    def __init__(self, path: str | Path, seed: int) -> None:
        self._path = Path(path)
        self._seed = seed
        self._ticks: list[dict[str, Any]] = []

    @property
    def ticks(self) -> list[dict[str, Any]]:
        return self._ticks

    def record_tick(
        self,
        tick: int,
        time: float,
        difficulty: float,
        agents: Iterable[Agent],
        events: Iterable[AIEvent],
    ) -> None:
        self._ticks.append(
            {
                "tick": tick,
                "time": round(time, 6),
                "difficulty": round(difficulty, 6),
                "agents": [
                    {
                        "id": a.id,
                        "archetype": a.archetype,
                        "pos": [round(a.pos.x, 4), round(a.pos.y, 4)],
                        "health": a.health,
                        "state": a.state.name,
                        "cursor": a.cursor,
                    }
                    for a in agents
                ],
                "events": [e.to_dict() for e in events],
            }
        )

    def flush(self) -> None:
        """Write accumulated data to disk."""
        replay = {
            "version": "1.0",
            "seed": self._seed,
            "total_ticks": len(self._ticks),
            "ticks": self._ticks,
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(replay, indent=2), encoding="utf-8")
        logger.info("Replay saved to %s (%d ticks)", self._path, len(self._ticks))
