"""
Shared fixtures for the crawler tests.
"""

import random

import pytest


class FixedRandom(random.Random):
    """A random source whose every draw returns the same value."""

    def __init__(self, value: float):
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def rng_returning():
    """Factory for random sources with a fixed draw."""
    return FixedRandom


@pytest.fixture
def no_crit_rng():
    # Above every crit and drop chance used in the tests.
    return FixedRandom(0.99)


@pytest.fixture
def crit_rng():
    return FixedRandom(0.0)
