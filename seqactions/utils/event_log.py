"""Bounded, thread-safe log of queue lifecycle events served by the API.

Once *maxlen* events are held the oldest are discarded, so a long run keeps
only its most recent history.
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SimEvent:
    """A single lifecycle event (add, start, stop, remove, drop, repeat, despawn)."""

    tick: int
    category: str
    message: str
    entity_ids: tuple[int, ...] = ()


class EventLog:
    """Event log holding at most *maxlen* events (unbounded when None).

    Appending past the limit evicts the oldest events first. Writers append
    one batch per tick under a lock; readers get copies.
    """

    __slots__ = ("_buffer", "_lock")

    def __init__(self, maxlen: int | None = 10_000) -> None:
        self._buffer: deque[SimEvent] = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def append(self, event: SimEvent) -> None:
        with self._lock:
            self._buffer.append(event)

    def append_many(self, events: list[SimEvent]) -> None:
        with self._lock:
            self._buffer.extend(events)

    def since_tick(self, tick: int) -> list[SimEvent]:
        """Return all events with tick >= *tick*."""
        with self._lock:
            return [e for e in self._buffer if e.tick >= tick]

    def for_entity(self, entity_id: int) -> list[SimEvent]:
        with self._lock:
            return [e for e in self._buffer if entity_id in e.entity_ids]

    def latest(self, count: int = 50) -> list[SimEvent]:
        """Return the *count* most recent events."""
        with self._lock:
            items = list(self._buffer)
        return items[-count:]

    def clear(self) -> None:
        with self._lock:
            self._buffer.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)
