"""Action queue and simulation configuration with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass

from seqactions.core.enums import AddOrder


@dataclass(frozen=True)
class SimulationConfig:
    """Immutable configuration for the queue driver and the demo run."""

    # Queue behaviour
    strict_reentrancy: bool = True       # raise on immediate modify from inside a callback; False = log + no-op
    max_chain_length: int = 1024         # action starts per operation on one agent, deferred ones included
    default_order: AddOrder = AddOrder.BACK
    default_start: bool = True

    # World loop
    world_seed: int = 42
    max_ticks: int = 1000

    # Demo scenario
    initial_agent_count: int = 8
    plan_length: int = 4                 # actions handed to an agent when its queue runs dry
    countdown_min: int = 0               # 0 = zero-duration action, finishes inside on_start
    countdown_max: int = 6
    pause_chance: float = 0.05
    despawn_chance: float = 0.01         # per agent per tick
    respawn: bool = True

    # Logging
    log_level: str = "INFO"
    event_log_size: int = 10_000
