"""Domain-separated deterministic RNG using xxhash.

Every draw is a pure function of (seed, domain, agent id, tick, salt), so a
demo run replays identically for the same seed regardless of how many
draws other agents made.
"""

from __future__ import annotations

import struct
from typing import Sequence, TypeVar

import xxhash

from seqactions.core.enums import Domain

T = TypeVar("T")


class DeterministicRNG:
    """Stateless domain-separated pseudo-random number generator."""

    __slots__ = ("_seed",)

    _MAX_UINT64 = (1 << 64) - 1

    def __init__(self, seed: int) -> None:
        self._seed = seed

    @property
    def seed(self) -> int:
        return self._seed

    def _hash(self, domain: Domain, agent_id: int, tick: int, salt: int) -> int:
        payload = struct.pack("<qiqqi", self._seed, domain.value, agent_id, tick, salt)
        return xxhash.xxh64(payload).intdigest()

    def next_float(self, domain: Domain, agent_id: int, tick: int, salt: int = 0) -> float:
        """Return a deterministic float in [0.0, 1.0)."""
        return self._hash(domain, agent_id, tick, salt) / (self._MAX_UINT64 + 1)

    def next_int(self, domain: Domain, agent_id: int, tick: int, low: int, high: int, salt: int = 0) -> int:
        """Return a deterministic integer in [low, high] inclusive."""
        f = self.next_float(domain, agent_id, tick, salt)
        return low + int(f * (high - low + 1))

    def next_bool(self, domain: Domain, agent_id: int, tick: int, probability: float = 0.5, salt: int = 0) -> bool:
        """Return True with the given probability."""
        return self.next_float(domain, agent_id, tick, salt) < probability

    def choice(self, domain: Domain, agent_id: int, tick: int, options: Sequence[T], salt: int = 0) -> T:
        if not options:
            raise ValueError("choice() from an empty sequence")
        return options[self.next_int(domain, agent_id, tick, 0, len(options) - 1, salt)]
