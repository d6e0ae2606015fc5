"""Base Action — the unit of sequential work attached to an agent.

Lifecycle of one instance::

    on_add -> (on_start -> is_finished* -> on_stop)* -> on_remove -> on_drop

``on_add``, ``on_remove`` and ``on_drop`` run exactly once. ``on_start`` /
``on_stop`` pairs repeat when the action is paused and resumed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable

from seqactions.core.enums import DropReason, StopReason

if TYPE_CHECKING:
    from seqactions.core.world_state import WorldState


class Action(ABC):
    """Base class for all actions.

    Subclass this and implement:
      - on_start(agent, world):  begin (or resume) work; return True if
                                 already finished
      - is_finished(agent, world): polled once per tick while running;
                                 must not mutate the world
      - on_stop(agent, world, reason): leave the current slot; *agent* is
                                 None if the agent was despawned

    Callbacks receive the world while the action is detached from its
    agent's queue. Queue edits from inside a callback must go through
    ``world.deferred_actions(agent)``.
    """

    @property
    def name(self) -> str:
        return type(self).__name__

    def on_add(self, agent: int, world: WorldState) -> None:
        """Called once when the action is pushed into the queue."""

    @abstractmethod
    def on_start(self, agent: int, world: WorldState) -> bool:
        """Start or resume. Returning True finishes the action immediately."""

    @abstractmethod
    def is_finished(self, agent: int, world: WorldState) -> bool:
        """Query whether the action is done."""

    @abstractmethod
    def on_stop(self, agent: int | None, world: WorldState, reason: StopReason) -> None:
        """Called when the action leaves the current slot."""

    def on_remove(self, agent: int | None, world: WorldState) -> None:
        """Called once when the action permanently leaves the queue."""

    def on_drop(self, agent: int | None, world: WorldState, reason: DropReason) -> None:
        """Final call. Nothing is called on this instance afterwards."""

    def __repr__(self) -> str:
        return f"<{self.name}>"


def into_action(obj: Any) -> Action:
    """Accept an Action instance or a plain ``fn(agent, world) -> bool``."""
    if isinstance(obj, Action):
        return obj
    if callable(obj):
        from seqactions.actions.closure import FnAction
        return FnAction(obj)
    raise TypeError(f"Expected an Action or a callable, got {type(obj).__name__}")


StartFn = Callable[[int, "WorldState"], bool]
