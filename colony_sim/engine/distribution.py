"""
colony_sim/engine/distribution.py
─────────────────────────────────
Random delays between events.

Every recurring event re-schedules itself after a random delay:
  Move         → mean = delta × weight of the edge just walked
  Evaporation  → mean = eta
  first Move   → mean = delta

The delay distribution is pluggable (RandomIntervalPolicy). The simulator
holds an IntervalFactory: given a mean, it builds the policy to draw from.
The provided policy is exponential, parameterised by its MEAN (not its rate).
"""

from __future__ import annotations

import math
from functools import partial
from typing import Callable, Optional, Protocol

import numpy as np


class RandomIntervalPolicy(Protocol):
    """Strategy interface: draw one non-negative delay."""

    def draw(self) -> float: ...


IntervalFactory = Callable[[float], RandomIntervalPolicy]
"""Builds a RandomIntervalPolicy for a given mean delay."""


class ExponentialInterval:
    """
    Exponentially distributed delays with a given mean.

    Formula (inverse transform sampling):
        u     ~ Uniform[0, 1)
        delay = −ln(1 − u) × mean

    1 − u lies in (0, 1], so the logarithm is always defined.

    Raises:
        ValueError: if mean is negative.
    """

    def __init__(self, mean: float, rng: Optional[np.random.Generator] = None) -> None:
        if mean < 0.0:
            raise ValueError(f"ExponentialInterval requires mean≥0, got mean={mean}")
        self._mean = mean
        self._rng = rng if rng is not None else np.random.default_rng()

    def draw(self) -> float:
        u = float(self._rng.random())
        return -math.log(1.0 - u) * self._mean

    @property
    def mean(self) -> float:
        return self._mean

    def __repr__(self) -> str:
        return f"ExponentialInterval(mean={self._mean})"


def exponential_factory(rng: Optional[np.random.Generator] = None) -> IntervalFactory:
    """An IntervalFactory producing ExponentialInterval policies on a shared rng."""
    rng = rng if rng is not None else np.random.default_rng()
    return partial(ExponentialInterval, rng=rng)
