"""EngineManager: runs a scripted AI session on a background thread.

The API reads from an atomically swapped immutable Snapshot.  The AI
system is mutated only while ``_system_lock`` is held: by the engine
thread for each tick, and briefly by API commands such as a difficulty
override.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING

from horde.core.snapshot import Snapshot
from horde.engine.driver import SimulationDriver
from horde.engine.events import AgentRemoved, AgentSpawned
from horde.utils.event_log import EventLog

if TYPE_CHECKING:
    from horde.config import AIConfig
    from horde.core.grid import OccupancyGrid
    from horde.engine.system import AISystem

logger = logging.getLogger(__name__)


class EngineManager:
    """Manages the AI session lifecycle on a background thread.

    Provides thread-safe access to:
      - latest snapshot (atomic reference swap)
      - event log (lock-guarded ring buffer)
      - control commands (start / pause / resume / step / reset)
    """

    def __init__(self, config: AIConfig) -> None:
        self.config = config
        self._tick_rate: float = config.tick_rate

        self._driver: SimulationDriver | None = None

        # Thread-safe shared state
        self._snapshot_lock = threading.Lock()
        self._system_lock = threading.Lock()
        self._latest_snapshot: Snapshot | None = None
        self._event_log = EventLog(config.event_log_size)

        # Counters
        self._total_spawned: int = 0
        self._total_removed: int = 0

        # Control
        self._thread: threading.Thread | None = None
        self._running = threading.Event()
        self._paused = threading.Event()
        self._step_requested = threading.Event()
        self._stop_requested = threading.Event()

        self._build()

    # -- public properties --

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def paused(self) -> bool:
        return self._paused.is_set()

    @property
    def tick_rate(self) -> float:
        return self._tick_rate

    @tick_rate.setter
    def tick_rate(self, value: float) -> None:
        self._tick_rate = max(0.01, min(value, 2.0))

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def total_spawned(self) -> int:
        return self._total_spawned

    @property
    def total_removed(self) -> int:
        return self._total_removed

    @property
    def system(self) -> AISystem:
        assert self._driver is not None
        return self._driver.system

    @property
    def current_tick(self) -> int:
        """Tick of the latest published snapshot (0 before the first)."""
        snap = self.get_snapshot()
        return snap.tick if snap else 0

    # -- snapshot access --

    def get_snapshot(self) -> Snapshot | None:
        with self._snapshot_lock:
            return self._latest_snapshot

    def get_grid(self) -> OccupancyGrid | None:
        """The arena grid; obstacles never change during a session."""
        return self._driver.world.grid if self._driver else None

    # -- commands --

    def set_difficulty_override(self, level: float) -> float:
        with self._system_lock:
            applied = self.system.set_difficulty_override(level)
            self._publish_snapshot()
        return applied

    def clear_difficulty_override(self) -> None:
        with self._system_lock:
            self.system.clear_difficulty_override()
            self._publish_snapshot()

    # -- lifecycle --

    def start(self) -> None:
        if self._running.is_set():
            return
        self._stop_requested.clear()
        self._paused.clear()
        self._running.set()
        self._thread = threading.Thread(target=self._run_loop, name="horde-engine", daemon=True)
        self._thread.start()
        logger.info("EngineManager started (tick_rate=%.3fs)", self._tick_rate)

    def pause(self) -> None:
        self._paused.set()
        logger.info("EngineManager paused at tick %d", self.current_tick)

    def resume(self) -> None:
        self._paused.clear()
        logger.info("EngineManager resumed at tick %d", self.current_tick)

    def step(self) -> None:
        """Execute exactly one tick (must be paused)."""
        if not self._paused.is_set():
            self.pause()
        self._step_requested.set()

    def stop(self) -> None:
        self._stop_requested.set()
        self._paused.clear()
        self._running.clear()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        if self._driver is not None:
            self._driver.system.teardown()
        logger.info("EngineManager stopped.")

    def reset(self) -> None:
        """Stop, rebuild, and leave stopped, ready to start."""
        self.stop()
        self._event_log.clear()
        self._total_spawned = 0
        self._total_removed = 0
        self._build()
        logger.info("EngineManager reset.")

    # -- internals --

    def _build(self) -> None:
        with self._system_lock:
            self._driver = SimulationDriver(self.config, event_log=self._event_log)
            self._publish_snapshot()

    def _run_loop(self) -> None:
        """Background thread main loop."""
        logger.info("Engine thread started.")
        assert self._driver is not None

        while not self._stop_requested.is_set():
            if self._paused.is_set() and not self._step_requested.is_set():
                time.sleep(0.01)
                continue

            single_step = self._step_requested.is_set()
            if single_step:
                self._step_requested.clear()

            with self._system_lock:
                events = self._driver.step()
                self._total_spawned += sum(1 for e in events if isinstance(e, AgentSpawned))
                self._total_removed += sum(1 for e in events if isinstance(e, AgentRemoved))
                self._publish_snapshot()

            if not single_step:
                time.sleep(self._tick_rate)

        self._running.clear()
        logger.info("Engine thread exited.")

    def _publish_snapshot(self) -> None:
        assert self._driver is not None
        snap = self._driver.system.create_snapshot()
        with self._snapshot_lock:
            self._latest_snapshot = snap
