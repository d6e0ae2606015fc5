"""Per-agent queue components: the pending ActionQueue and the CurrentAction slot."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Iterator, NamedTuple

from seqactions.core.enums import AddOrder, AgentStatus

if TYPE_CHECKING:
    from seqactions.actions.base import Action


@dataclass(frozen=True, slots=True)
class AddConfig:
    """How an ``add`` call inserts actions and whether it may start one."""

    order: AddOrder = AddOrder.BACK
    start: bool = True
    repeat: bool = False  # a finished action goes back to the end of the queue


class QueuedAction(NamedTuple):
    """A pending action and whether it repeats once finished."""

    action: Action
    repeat: bool = False


class ActionQueue:
    """Ordered pending actions for one agent.

    Nothing in here has had ``on_start`` called yet. Iterating yields the
    actions; ``pop_front`` yields the entry with its repeat flag.
    """

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: deque[QueuedAction] = deque()

    def push_back(self, action: Action, repeat: bool = False) -> None:
        self._items.append(QueuedAction(action, repeat))

    def push_front(self, action: Action, repeat: bool = False) -> None:
        self._items.appendleft(QueuedAction(action, repeat))

    def extend_back(self, actions: Iterable[Action], repeat: bool = False) -> None:
        self._items.extend(QueuedAction(a, repeat) for a in actions)

    def extend_front(self, actions: Iterable[Action], repeat: bool = False) -> None:
        """Insert *actions* at the front, keeping their given order."""
        self._items.extendleft(reversed([QueuedAction(a, repeat) for a in actions]))

    def push(self, action: Action, order: AddOrder, repeat: bool = False) -> None:
        if order == AddOrder.FRONT:
            self.push_front(action, repeat)
        else:
            self.push_back(action, repeat)

    def extend(self, actions: Iterable[Action], order: AddOrder, repeat: bool = False) -> None:
        if order == AddOrder.FRONT:
            self.extend_front(actions, repeat)
        else:
            self.extend_back(actions, repeat)

    def pop_front(self) -> QueuedAction | None:
        if self._items:
            return self._items.popleft()
        return None

    def take_all(self) -> list[Action]:
        """Detach every pending action, leaving the queue empty."""
        items = [entry.action for entry in self._items]
        self._items.clear()
        return items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Action]:
        return (entry.action for entry in self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"ActionQueue({[a.name for a in self]})"


class CurrentAction:
    """The single active-action slot of an agent.

    A paused action keeps its slot but is not polled. ``repeat`` survives
    ``take`` so a detached action can be put back without restating it.
    """

    __slots__ = ("action", "paused", "started_tick", "repeat")

    def __init__(self) -> None:
        self.action: Action | None = None
        self.paused: bool = False
        self.started_tick: int = -1
        self.repeat: bool = False

    def take(self) -> Action | None:
        """Detach the current action, leaving the slot empty."""
        action = self.action
        self.action = None
        self.paused = False
        return action

    def put(
        self,
        action: Action,
        paused: bool = False,
        started_tick: int | None = None,
        repeat: bool | None = None,
    ) -> None:
        """Reattach *action*. *started_tick* and *repeat* are only updated when given."""
        self.action = action
        self.paused = paused
        if started_tick is not None:
            self.started_tick = started_tick
        if repeat is not None:
            self.repeat = repeat

    @property
    def status(self) -> AgentStatus:
        if self.action is None:
            return AgentStatus.IDLE
        return AgentStatus.PAUSED if self.paused else AgentStatus.RUNNING

    def __bool__(self) -> bool:
        return self.action is not None

    def __repr__(self) -> str:
        name = self.action.name if self.action is not None else None
        return f"CurrentAction({name}, paused={self.paused})"


@dataclass(slots=True)
class AgentActions:
    """Queue storage owned by the world, keyed by agent id."""

    queue: ActionQueue = field(default_factory=ActionQueue)
    current: CurrentAction = field(default_factory=CurrentAction)
    carry_over: bool = False  # an advance chain was cut short; resume next step

    @property
    def status(self) -> AgentStatus:
        return self.current.status
