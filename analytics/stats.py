"""Small numeric helpers shared by the detectors and schedulers."""

from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np

__all__ = [
    "RECENCY_BASE",
    "round_half_up",
    "cents_key",
    "remove_outliers",
    "recency_weighted_mean",
    "coefficient_of_variation",
    "recent_mode",
]

RECENCY_BASE = 1.5


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero on the positive side, like ``Math.round``."""

    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def cents_key(amount: float) -> int:
    return int(round_half_up(amount * 100))


def remove_outliers(values: Sequence[float]) -> np.ndarray:
    """Drop points outside 1.5x the interquartile range, preserving order."""

    array = np.asarray(values, dtype=float)
    if array.size < 3:
        return array

    q1, q3 = np.percentile(array, [25, 75])
    spread = q3 - q1
    mask = (array >= q1 - 1.5 * spread) & (array <= q3 + 1.5 * spread)
    cleaned = array[mask]
    return cleaned if cleaned.size else array


def recency_weighted_mean(values: Sequence[float]) -> float:
    """Weighted mean with weights ``1.5**i`` where the newest value is last.

    Weights are normalised against the newest point so long histories do not
    overflow.
    """

    array = np.asarray(values, dtype=float)
    if array.size == 0:
        return 0.0
    exponents = np.arange(array.size, dtype=float) - (array.size - 1)
    weights = np.power(RECENCY_BASE, exponents)
    return float(np.sum(array * weights) / np.sum(weights))


def coefficient_of_variation(values: Sequence[float]) -> float:
    array = np.asarray(values, dtype=float)
    if array.size == 0:
        return 0.0
    mean = float(np.mean(array))
    if mean == 0:
        return math.inf
    return float(np.std(array) / abs(mean))


def recent_mode(values: Iterable[int]) -> int:
    """Most frequent value; ties go to the value seen most recently."""

    ordered = list(values)
    counts: dict[int, int] = {}
    last_seen: dict[int, int] = {}
    for index, value in enumerate(ordered):
        counts[value] = counts.get(value, 0) + 1
        last_seen[value] = index
    return max(counts, key=lambda value: (counts[value], last_seen[value]))
