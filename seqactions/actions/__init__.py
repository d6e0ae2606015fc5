"""Action system: the Action base class and a few reusable actions."""

from seqactions.actions.base import Action, into_action
from seqactions.actions.closure import FnAction
from seqactions.actions.countdown import CountdownAction, countdown_system

__all__ = ["Action", "CountdownAction", "FnAction", "countdown_system", "into_action"]
