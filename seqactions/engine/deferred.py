"""Deferred queue edits captured during action callbacks.

Callbacks run while their action is detached from the queue, so they may
not edit the queue directly. Edits go into this buffer instead and the
QueueDriver applies them at the next stable point, in FIFO order per agent.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import IntEnum, unique
from typing import Any


@unique
class DeferredOp(IntEnum):
    """Queue operations that can be deferred."""

    ADD = 0
    EXECUTE = 1
    NEXT = 2
    DONE = 3
    CANCEL = 4
    PAUSE = 5
    SKIP = 6
    CLEAR = 7
    CUSTOM = 8


@dataclass(frozen=True, slots=True)
class DeferredCommand:
    """One captured edit. *payload* depends on *op*.

    ADD:    (list[Action], AddConfig)
    SKIP:   int
    CUSTOM: fn(world)
    """

    agent: int
    op: DeferredOp
    payload: Any = None

    def __repr__(self) -> str:
        return f"Deferred(agent={self.agent}, {self.op.name})"


class DeferredActions:
    """Per-agent FIFO buffers of DeferredCommands."""

    __slots__ = ("_pending",)

    def __init__(self) -> None:
        self._pending: dict[int, deque[DeferredCommand]] = {}

    def push(self, command: DeferredCommand) -> None:
        self._pending.setdefault(command.agent, deque()).append(command)

    def pop(self, agent: int) -> DeferredCommand | None:
        """Remove and return the oldest command for *agent*."""
        buf = self._pending.get(agent)
        if not buf:
            return None
        command = buf.popleft()
        if not buf:
            del self._pending[agent]
        return command

    def discard(self, agent: int) -> int:
        """Drop every queue command for *agent*; CUSTOM commands are kept.

        Returns the number of commands dropped.
        """
        buf = self._pending.pop(agent, None)
        if not buf:
            return 0
        kept = deque(c for c in buf if c.op == DeferredOp.CUSTOM)
        if kept:
            self._pending[agent] = kept
        return len(buf) - len(kept)

    def pending(self, agent: int) -> int:
        return len(self._pending.get(agent, ()))

    def agents(self) -> list[int]:
        """Agents with pending commands, in first-pushed order."""
        return list(self._pending)

    def __len__(self) -> int:
        return sum(len(buf) for buf in self._pending.values())

    def __bool__(self) -> bool:
        return bool(self._pending)
