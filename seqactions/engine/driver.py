"""QueueDriver — advances every agent's action queue once per tick.

All queue transitions live here. Each transition follows the same
detach / call / reattach protocol:

  1. the action is taken out of its queue or slot into a local,
  2. the callback runs with the whole world available to it,
  3. the action is put back (or dropped), and only then
  4. deferred commands for the agent are drained.

A callback therefore never sees its own action in the agent's queue, and
queue edits it requests through ``deferred_actions`` land at step 4.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from seqactions.core.enums import DropReason, StopReason
from seqactions.engine.deferred import DeferredCommand, DeferredOp

if TYPE_CHECKING:
    from seqactions.actions.base import Action
    from seqactions.core.components import AddConfig, AgentActions
    from seqactions.core.world_state import WorldState

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _live(world: WorldState, agent: int) -> int | None:
    """The agent id if it still resolves, else None."""
    return agent if world.is_alive(agent) else None


def _call(world: WorldState, agent: int, fn: Callable[..., Any], *args: Any) -> Any:
    with world.callback_scope(agent):
        return fn(*args)


def _trace(world: WorldState, agent: int, category: str, action: Action, detail: str = "") -> None:
    message = f"Agent #{agent}: {action.name} {category}{f' ({detail})' if detail else ''}"
    logger.debug("Tick %d: %s", world.tick, message)
    world.emit(category, message, entity_ids=(agent,))


def _stop(world: WorldState, agent: int, action: Action, reason: StopReason) -> None:
    _call(world, agent, action.on_stop, _live(world, agent), world, reason)
    _trace(world, agent, "stop", action, reason.name)


def _retire(world: WorldState, agent: int, action: Action, reason: DropReason) -> None:
    """on_remove then on_drop; the action is gone afterwards."""
    _call(world, agent, action.on_remove, _live(world, agent), world)
    _trace(world, agent, "remove", action)
    _call(world, agent, action.on_drop, _live(world, agent), world, reason)
    _trace(world, agent, "drop", action, reason.name)


def _settled(world: WorldState, agent: int, slots: AgentActions) -> bool:
    """Reconcile after callbacks ran: tear down if the agent died, else drain.

    Returns True if the agent is still alive and owns *slots*.
    """
    if world.agents.get(agent) is not slots:
        return False
    if not world.is_alive(agent):
        teardown_despawned(world, agent)
        return False
    drain_deferred(world, agent)
    return world.agents.get(agent) is slots and world.is_alive(agent)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def add_actions(world: WorldState, agent: int, actions: list[Action], config: AddConfig) -> None:
    """Enqueue *actions* (calling ``on_add`` on each) and optionally start one."""
    slots = world.agents.get(agent)
    if slots is None or not world.is_alive(agent):
        logger.warning("Tick %d: add on agent #%d ignored: no live queue", world.tick, agent)
        return
    if not actions:
        return

    added: list[Action] = []
    for action in actions:
        if not world.is_alive(agent):
            logger.warning(
                "Tick %d: agent #%d despawned during on_add, %d action(s) not added",
                world.tick, agent, len(actions) - len(added),
            )
            break
        _call(world, agent, action.on_add, agent, world)
        _trace(world, agent, "add", action, config.order.name)
        added.append(action)

    slots.queue.extend(added, config.order, config.repeat)

    if not _settled(world, agent, slots):
        return
    if config.start and not slots.current:
        start_next_action(world, agent)


def _start(
    world: WorldState,
    agent: int,
    slots: AgentActions,
    action: Action,
    repeat: bool = False,
) -> bool:
    """Run ``on_start`` on a detached *action* and install it as current.

    Returns True if the action finished on the spot, was torn down, and the
    advance chain may continue with the next pending action.
    """
    world.count_start(agent)
    finished = _call(world, agent, action.on_start, agent, world)
    slots.current.put(action, started_tick=world.tick, repeat=repeat)
    _trace(world, agent, "start", action, "finished" if finished else "")

    if not _settled(world, agent, slots):
        return False
    if not finished or slots.current.action is not action or slots.current.paused:
        return False
    if not _finish(world, agent, slots, StopReason.FINISHED, DropReason.DONE):
        return False
    return not slots.current


def start_next_action(world: WorldState, agent: int) -> None:
    """Idle -> Running: pop the next pending action and start it.

    Actions that finish inside ``on_start`` are torn down and the next one
    is started within the same call. At most ``max_chain_length`` actions
    start per operation on an agent, counting those started by its deferred
    commands; anything left over is picked up on the driver's next step.
    """
    slots = world.agents.get(agent)
    if slots is None:
        return
    if not world.is_alive(agent):
        teardown_despawned(world, agent)
        return
    if slots.current:
        return

    slots.carry_over = False
    with world.operation_scope(agent):
        while slots.queue:
            if world.chain_length(agent) >= world.config.max_chain_length:
                if not slots.carry_over:
                    slots.carry_over = True
                    logger.warning(
                        "Tick %d: agent #%d started %d actions in one go, deferring the rest to next step",
                        world.tick, agent, world.chain_length(agent),
                    )
                return
            entry = slots.queue.pop_front()
            if not _start(world, agent, slots, entry.action, entry.repeat):
                return


def resume_current_action(world: WorldState, agent: int) -> None:
    """Paused -> Running: call ``on_start`` again on the same action."""
    slots = world.agents.get(agent)
    if slots is None or not slots.current.paused:
        return
    repeat = slots.current.repeat
    action = slots.current.take()
    if _start(world, agent, slots, action, repeat):
        start_next_action(world, agent)


def _finish(
    world: WorldState,
    agent: int,
    slots: AgentActions,
    stop_reason: StopReason,
    drop_reason: DropReason,
) -> bool:
    """Take the current action out and tear it down for good.

    ``on_stop`` is skipped for a paused action; it was already stopped.
    A repeating action that finished goes back to the end of the queue
    instead of being removed and dropped.
    Returns True if the agent is still alive afterwards.
    """
    paused = slots.current.paused
    repeat = slots.current.repeat
    action = slots.current.take()
    if action is None:
        return world.is_alive(agent)
    if not paused:
        _stop(world, agent, action, stop_reason)
    if repeat and stop_reason == StopReason.FINISHED:
        slots.queue.push_back(action, repeat=True)
        _trace(world, agent, "repeat", action)
    else:
        _retire(world, agent, action, drop_reason)
    return _settled(world, agent, slots)


def stop_current_action(world: WorldState, agent: int, reason: StopReason) -> None:
    """Stop the current action.

    FINISHED tears it down (Done), or requeues it if it repeats, then
    advances. CANCELED tears it down (Cleared) and leaves the agent idle.
    PAUSED keeps it in the slot.
    """
    slots = world.agents.get(agent)
    if slots is None or not slots.current:
        return

    if reason == StopReason.PAUSED:
        if slots.current.paused:
            return
        started = slots.current.started_tick
        action = slots.current.take()
        _stop(world, agent, action, reason)
        slots.current.put(action, paused=True, started_tick=started)
        _settled(world, agent, slots)
        return

    if reason == StopReason.FINISHED:
        if _finish(world, agent, slots, reason, DropReason.DONE) and not slots.current:
            start_next_action(world, agent)
        return

    _finish(world, agent, slots, reason, DropReason.CLEARED)


def next_action(world: WorldState, agent: int) -> None:
    """Finish whatever is current (if anything) and start the next action."""
    slots = world.agents.get(agent)
    if slots is None:
        return
    if slots.current:
        stop_current_action(world, agent, StopReason.FINISHED)
    else:
        start_next_action(world, agent)


def execute_actions(world: WorldState, agent: int) -> None:
    """Resume a paused action, or start the next one if idle."""
    slots = world.agents.get(agent)
    if slots is None:
        return
    if slots.current.paused:
        resume_current_action(world, agent)
    elif not slots.current:
        start_next_action(world, agent)


def skip_actions(world: WorldState, agent: int, n: int = 1) -> None:
    """Drop the next *n* pending actions without starting them."""
    slots = world.agents.get(agent)
    if slots is None or n <= 0:
        return
    skipped: list[Action] = []
    while len(skipped) < n:
        entry = slots.queue.pop_front()
        if entry is None:
            break
        skipped.append(entry.action)
    for action in skipped:
        _retire(world, agent, action, DropReason.CLEARED)
    if skipped:
        _settled(world, agent, slots)


def clear_actions(world: WorldState, agent: int) -> None:
    """Cancel the current action and drop every pending one."""
    slots = world.agents.get(agent)
    if slots is None:
        return
    paused = slots.current.paused
    current = slots.current.take()
    pending = slots.queue.take_all()
    slots.carry_over = False

    if current is not None:
        if not paused:
            _stop(world, agent, current, StopReason.CANCELED)
        _retire(world, agent, current, DropReason.CLEARED)
    for action in pending:
        _retire(world, agent, action, DropReason.CLEARED)
    _settled(world, agent, slots)


def teardown_despawned(world: WorldState, agent: int) -> None:
    """Tear down every action of a despawned agent. Idempotent.

    Current action first (stopped as Canceled unless paused), then pending
    actions in queue order; all receive ``agent=None``. While one of the
    agent's callbacks is running its action is detached, so the teardown
    waits until that callback has returned and the action is back.
    """
    if world.in_callback(agent):
        return
    slots = world.agents.pop(agent, None)
    if slots is None:
        return
    paused = slots.current.paused
    current = slots.current.take()
    pending = slots.queue.take_all()
    dropped = world.deferred.discard(agent)

    # The entity is gone, so every callback below sees agent=None.
    if current is not None:
        if not paused:
            _stop(world, agent, current, StopReason.CANCELED)
        _retire(world, agent, current, DropReason.DESPAWNED)
    for action in pending:
        _retire(world, agent, action, DropReason.DESPAWNED)

    torn = len(pending) + (current is not None)
    logger.debug(
        "Tick %d: agent #%d despawned, %d action(s) torn down, %d deferred command(s) dropped",
        world.tick, agent, torn, dropped,
    )
    world.emit("despawn", f"Agent #{agent} despawned with {torn} action(s)", entity_ids=(agent,))


# ---------------------------------------------------------------------------
# Deferred commands
# ---------------------------------------------------------------------------

def apply_command(world: WorldState, command: DeferredCommand) -> None:
    """Apply one deferred command now."""
    agent = command.agent
    op = command.op

    if op == DeferredOp.CUSTOM:
        command.payload(world)
        return

    if agent not in world.agents:
        logger.debug("Tick %d: dropping %r (no queue)", world.tick, command)
        return
    if not world.is_alive(agent):
        teardown_despawned(world, agent)
        return

    with world.operation_scope(agent):
        if op == DeferredOp.ADD:
            actions, config = command.payload
            add_actions(world, agent, actions, config)
        elif op == DeferredOp.EXECUTE:
            execute_actions(world, agent)
        elif op == DeferredOp.NEXT:
            next_action(world, agent)
        elif op == DeferredOp.DONE:
            stop_current_action(world, agent, StopReason.FINISHED)
        elif op == DeferredOp.CANCEL:
            stop_current_action(world, agent, StopReason.CANCELED)
        elif op == DeferredOp.PAUSE:
            stop_current_action(world, agent, StopReason.PAUSED)
        elif op == DeferredOp.SKIP:
            skip_actions(world, agent, command.payload)
        elif op == DeferredOp.CLEAR:
            clear_actions(world, agent)


def drain_deferred(world: WorldState, agent: int) -> int:
    """Apply pending commands for *agent* one at a time, oldest first.

    Does nothing while a callback for *agent* is still on the stack, or
    while an outer call is already draining *agent*: transitions applied by
    a command settle back into that outer loop, which picks up whatever
    they queued.
    Returns the number of commands applied.
    """
    if world.in_callback(agent) or world.is_draining(agent):
        return 0
    applied = 0
    with world.draining_scope(agent):
        while True:
            command = world.deferred.pop(agent)
            if command is None:
                return applied
            apply_command(world, command)
            applied += 1


# ---------------------------------------------------------------------------
# Per-tick driver
# ---------------------------------------------------------------------------

class QueueDriver:
    """Polls and advances every agent's queue once per tick.

    Per agent, in id order:
      1. Liveness: a despawned agent's queue is torn down.
      2. Deferred: commands queued since the last step are applied.
      3. Carry-over: resume an advance chain cut short last step.
      4. Poll: ``is_finished`` on a running action that started on an
         earlier tick; if finished, stop / remove / drop and advance.
    Afterwards, commands for agents without a queue (CUSTOM) are drained.
    """

    __slots__ = ("_steps",)

    def __init__(self) -> None:
        self._steps: int = 0

    @property
    def steps(self) -> int:
        return self._steps

    def step(self, world: WorldState) -> None:
        for agent in sorted(world.agents):
            self.step_agent(world, agent)
        for agent in world.deferred.agents():
            drain_deferred(world, agent)
        self._steps += 1

    def step_agent(self, world: WorldState, agent: int) -> None:
        slots = world.agents.get(agent)
        if slots is None:
            return
        if not world.is_alive(agent):
            teardown_despawned(world, agent)
            return

        with world.operation_scope(agent):
            drain_deferred(world, agent)
            if world.agents.get(agent) is not slots:
                return

            if slots.carry_over and not slots.current:
                start_next_action(world, agent)

            current = slots.current
            if current.action is None or current.paused or current.started_tick >= world.tick:
                return

            started = current.started_tick
            action = current.take()
            finished = _call(world, agent, action.is_finished, agent, world)
            current.put(action, started_tick=started)

            if not world.is_alive(agent):
                teardown_despawned(world, agent)
                return
            if finished:
                stop_current_action(world, agent, StopReason.FINISHED)
            else:
                drain_deferred(world, agent)

    def despawn(self, world: WorldState, agent: int) -> None:
        """Despawn *agent* and tear its queue down.

        Called from one of the agent's own callbacks, the teardown runs as
        soon as that callback returns.
        """
        world.despawn(agent)
        teardown_despawned(world, agent)
