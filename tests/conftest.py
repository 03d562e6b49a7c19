"""
Shared fixtures for the colony-sim tests.
"""

import pytest


class ScriptedRandom:
    """
    Stand-in for np.random.Generator: random() replays the given values,
    cycling when it runs out. Makes every roulette-wheel draw and every
    exponential delay deterministic without seeding.
    """

    def __init__(self, *values: float) -> None:
        self._values = list(values) or [0.0]
        self._i = 0
        self.calls = 0

    def random(self) -> float:
        value = self._values[self._i % len(self._values)]
        self._i += 1
        self.calls += 1
        return value


@pytest.fixture
def scripted_random():
    """Factory for scripted random sources: scripted_random(0.0, 0.9)."""
    return ScriptedRandom
