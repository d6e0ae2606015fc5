"""Exceptions raised by the action queue."""

from __future__ import annotations


class ActionsError(Exception):
    """Base exception for action queue misuse."""


class ReentrancyError(ActionsError):
    """The immediate modify surface was used while a callback for the same
    agent is still on the stack.

    Use ``world.deferred_actions(agent)`` from inside lifecycle callbacks.
    """

    def __init__(self, agent: int, operation: str) -> None:
        super().__init__(
            f"Immediate '{operation}' on agent {agent} from inside one of its "
            f"action callbacks; use deferred_actions() instead."
        )
        self.agent = agent
        self.operation = operation
