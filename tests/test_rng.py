"""Tests for the domain-separated deterministic RNG."""

import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from seqactions.core.enums import Domain
from seqactions.systems.rng import DeterministicRNG


class TestDeterministicRNG:

    def test_same_inputs_same_output(self):
        a, b = DeterministicRNG(42), DeterministicRNG(42)
        assert a.next_float(Domain.PLAN, 3, 10) == b.next_float(Domain.PLAN, 3, 10)

    def test_domains_are_separated(self):
        rng = DeterministicRNG(42)
        draws = {rng.next_float(d, 1, 1) for d in Domain}
        assert len(draws) == len(Domain)

    def test_float_range(self):
        rng = DeterministicRNG(1)
        for tick in range(500):
            assert 0.0 <= rng.next_float(Domain.DURATION, 1, tick) < 1.0

    def test_int_inclusive_bounds(self):
        rng = DeterministicRNG(1)
        values = {rng.next_int(Domain.DURATION, 1, tick, 0, 3) for tick in range(500)}
        assert values == {0, 1, 2, 3}

    def test_bool_extremes(self):
        rng = DeterministicRNG(9)
        assert not any(rng.next_bool(Domain.PAUSE, 1, t, 0.0) for t in range(100))
        assert all(rng.next_bool(Domain.PAUSE, 1, t, 1.0) for t in range(100))

    def test_choice_empty_raises(self):
        with pytest.raises(ValueError):
            DeterministicRNG(0).choice(Domain.PLAN, 1, 1, [])
