"""Anonymous actions built from a plain function."""

from __future__ import annotations

from typing import TYPE_CHECKING

from seqactions.actions.base import Action, StartFn
from seqactions.core.enums import StopReason

if TYPE_CHECKING:
    from seqactions.core.world_state import WorldState


class FnAction(Action):
    """Runs *fn(agent, world)* on start.

    The return value of *fn* is the "already finished" flag; when it returns
    False the queue holds here until someone calls ``next()``.
    """

    __slots__ = ("_fn", "_label")

    def __init__(self, fn: StartFn, label: str | None = None) -> None:
        self._fn = fn
        self._label = label or getattr(fn, "__name__", "fn")

    @property
    def name(self) -> str:
        return f"FnAction({self._label})"

    def on_start(self, agent: int, world: WorldState) -> bool:
        return bool(self._fn(agent, world))

    def is_finished(self, agent: int, world: WorldState) -> bool:
        return False

    def on_stop(self, agent: int | None, world: WorldState, reason: StopReason) -> None:
        pass
