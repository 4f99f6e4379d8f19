"""Seeded pseudo-random helpers for reproducible scheduling.

The generator is a 32-bit linear congruential generator with the Numerical
Recipes constants. Other implementations of the forecaster use the same
formula, so a given seed yields the same sequence everywhere.
"""

from __future__ import annotations

from datetime import date

import pandas as pd

__all__ = [
    "LinearCongruentialGenerator",
    "seed_for_date",
]

_MULTIPLIER = 1664525
_INCREMENT = 1013904223
_MODULUS = 2**32


def seed_for_date(day: date | pd.Timestamp) -> int:
    """Seed derived from the analysis date as the integer ``YYYYMMDD``."""

    stamp = pd.Timestamp(day)
    return stamp.year * 10_000 + stamp.month * 100 + stamp.day


class LinearCongruentialGenerator:
    """``state = (state * 1664525 + 1013904223) mod 2**32``; output ``state / 2**32``."""

    def __init__(self, seed: int) -> None:
        self.state = int(seed) % _MODULUS

    def random(self) -> float:
        """Advance the state and return a float in ``[0, 1)``."""

        self.state = (self.state * _MULTIPLIER + _INCREMENT) % _MODULUS
        return self.state / _MODULUS

    def randint(self, low: int, high: int) -> int:
        """Integer in ``[low, high]`` inclusive."""

        return low + int(self.random() * (high - low + 1))

    def choice_index(self, size: int) -> int:
        return int(self.random() * size)

    def approx_normal(self) -> float:
        """Sum of three uniforms rescaled to mean 0 and unit variance, in ``[-3, 3]``."""

        total = self.random() + self.random() + self.random()
        return (total - 1.5) / 0.5
