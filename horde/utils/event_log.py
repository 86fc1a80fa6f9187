"""Thread-safe ring buffer for AI events exposed via the API."""

from __future__ import annotations

import logging
import threading
from collections import deque
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from horde.engine.events import AIEvent

logger = logging.getLogger(__name__)

Listener = Callable[["AIEvent"], None]


class EventLog:
    """Bounded event log. Writers append; readers snapshot a slice.

    The oldest events fall off once ``maxlen`` is reached.  Listeners are
    called synchronously on the writer's thread, outside the lock.
    """

    __slots__ = ("_buffer", "_lock", "_listeners")

    def __init__(self, maxlen: int = 5000) -> None:
        self._buffer: deque[AIEvent] = deque(maxlen=maxlen)
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def append(self, event: AIEvent) -> None:
        with self._lock:
            self._buffer.append(event)
        self._notify(event)

    def append_many(self, events: list[AIEvent]) -> None:
        with self._lock:
            self._buffer.extend(events)
        for event in events:
            self._notify(event)

    def _notify(self, event: AIEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Event listener %r failed on %s", listener, event.category)

    def since_tick(self, tick: int) -> list[AIEvent]:
        """Return all events with tick >= *tick*."""
        with self._lock:
            return [e for e in self._buffer if e.tick >= tick]

    def latest(self, count: int = 50) -> list[AIEvent]:
        """Return the *count* most recent events."""
        with self._lock:
            items = list(self._buffer)
        return items[-count:]

    def drain(self) -> list[AIEvent]:
        """Return and remove every buffered event."""
        with self._lock:
            items = list(self._buffer)
            self._buffer.clear()
        return items

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()
