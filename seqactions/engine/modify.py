"""Chainable modify surfaces for an agent's action queue.

``world.actions(agent)`` applies each call immediately and must not be used
from inside one of the agent's own action callbacks.
``world.deferred_actions(agent)`` records each call and the QueueDriver
applies it once the running callback has returned.

Usage::

    world.actions(agent).add(CountdownAction(3)).order(AddOrder.FRONT).add(other)

    # inside Action.on_start:
    world.deferred_actions(agent).start(False).add(follow_up).next()

    # patrol forever: each leg goes back to the end once finished
    world.actions(agent).repeat().add_many([leg_a, leg_b])
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Callable, Iterable

from seqactions.core.components import AddConfig
from seqactions.core.enums import AddOrder
from seqactions.core.errors import ReentrancyError
from seqactions.engine.deferred import DeferredCommand, DeferredOp
from seqactions.engine.driver import apply_command

if TYPE_CHECKING:
    from seqactions.core.world_state import WorldState

logger = logging.getLogger(__name__)


def _coerce(obj: Any):
    from seqactions.actions.base import into_action
    return into_action(obj)


class _ActionsProxy:
    """Shared builder state: the agent and the AddConfig for this batch."""

    __slots__ = ("_world", "_agent", "_config")

    def __init__(self, world: WorldState, agent: int) -> None:
        self._world = world
        self._agent = agent
        cfg = world.config
        self._config = AddConfig(order=cfg.default_order, start=cfg.default_start)

    @property
    def agent(self) -> int:
        return self._agent

    def _apply(self, op: DeferredOp, payload: Any = None) -> None:
        raise NotImplementedError

    # -- batch configuration --

    def config(self, config: AddConfig):
        self._config = config
        return self

    def order(self, order: AddOrder):
        """Insertion order for the following ``add`` calls in this batch."""
        self._config = replace(self._config, order=order)
        return self

    def start(self, start: bool):
        """Whether the following ``add`` calls may start an action when idle."""
        self._config = replace(self._config, start=start)
        return self

    def repeat(self, repeat: bool = True):
        """Whether the following actions go back to the end of the queue once finished.

        Canceling or clearing still removes and drops a repeating action.
        """
        self._config = replace(self._config, repeat=repeat)
        return self

    # -- operations --

    def add(self, action):
        self._apply(DeferredOp.ADD, ([_coerce(action)], self._config))
        return self

    def add_many(self, actions: Iterable):
        """Add several actions as one batch.

        With ``AddOrder.FRONT`` the batch keeps its given order at the front.
        """
        batch = [_coerce(a) for a in actions]
        if batch:
            self._apply(DeferredOp.ADD, (batch, self._config))
        return self

    def execute(self):
        """Resume a paused action, or start the next one if idle."""
        self._apply(DeferredOp.EXECUTE)
        return self

    def next(self):
        """Finish the current action (if any) and start the next one."""
        self._apply(DeferredOp.NEXT)
        return self

    def done(self):
        """Finish the current action as if it reported finished, then advance."""
        self._apply(DeferredOp.DONE)
        return self

    def cancel(self):
        """Cancel the current action. The queue does not advance."""
        self._apply(DeferredOp.CANCEL)
        return self

    def pause(self):
        self._apply(DeferredOp.PAUSE)
        return self

    def skip(self, n: int = 1):
        """Drop the next *n* pending actions without starting them."""
        if n < 0:
            raise ValueError(f"skip count must be >= 0, got {n}")
        self._apply(DeferredOp.SKIP, n)
        return self

    def clear(self):
        """Cancel the current action and drop every pending one."""
        self._apply(DeferredOp.CLEAR)
        return self


class AgentActionsProxy(_ActionsProxy):
    """Immediate modify surface."""

    __slots__ = ()

    def _apply(self, op: DeferredOp, payload: Any = None) -> None:
        world, agent = self._world, self._agent
        if world.in_callback(agent):
            if world.config.strict_reentrancy:
                raise ReentrancyError(agent, op.name.lower())
            logger.error(
                "Tick %d: immediate %s on agent #%d from inside its own callback ignored; "
                "use deferred_actions()",
                world.tick, op.name.lower(), agent,
            )
            return
        if agent not in world.agents or not world.is_alive(agent):
            logger.warning(
                "Tick %d: %s on agent #%d ignored: agent is despawned or has no queue",
                world.tick, op.name.lower(), agent,
            )
            return
        apply_command(world, DeferredCommand(agent, op, payload))


class DeferredActionsProxy(_ActionsProxy):
    """Deferred modify surface, safe from inside action callbacks."""

    __slots__ = ()

    def _apply(self, op: DeferredOp, payload: Any = None) -> None:
        self._world.deferred.push(DeferredCommand(self._agent, op, payload))

    def custom(self, fn: Callable[[WorldState], None]):
        """Run *fn(world)* when this agent's deferred commands are drained."""
        self._apply(DeferredOp.CUSTOM, fn)
        return self
