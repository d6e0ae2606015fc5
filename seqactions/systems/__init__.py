"""World systems: deterministic RNG and the demo scenario."""

from seqactions.systems.demo import DemoScenario
from seqactions.systems.rng import DeterministicRNG

__all__ = ["DemoScenario", "DeterministicRNG"]
