"""Statistical primitives over small numeric series"""

import math
from typing import Sequence


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def variance(values: Sequence[float]) -> float:
    """Population variance"""
    if not values:
        return 0.0
    avg = mean(values)
    return sum((v - avg) ** 2 for v in values) / len(values)


def std_dev(values: Sequence[float]) -> float:
    return math.sqrt(variance(values))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Standard deviation as a percentage of the mean (0 when mean <= 0)"""
    avg = mean(values)
    if avg <= 0:
        return 0.0
    return std_dev(values) / avg * 100


def calculate_trend(values: Sequence[float]) -> float:
    """
    Ordinary least-squares slope of value against index.

    Returns 0 for fewer than two points or a degenerate denominator.
    """
    n = len(values)
    if n < 2:
        return 0.0

    x_mean = (n - 1) / 2
    y_mean = mean(values)

    numerator = 0.0
    denominator = 0.0
    for i, value in enumerate(values):
        numerator += (i - x_mean) * (value - y_mean)
        denominator += (i - x_mean) ** 2

    return numerator / denominator if denominator != 0 else 0.0


def z_score(value: float, avg: float, deviation: float) -> float:
    if deviation == 0:
        return 0.0
    return (value - avg) / deviation
