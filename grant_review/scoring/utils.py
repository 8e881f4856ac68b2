"""
Statistics Utilities
grant_review/scoring/utils.py

Small, dependency-free helpers shared by the scoring calculators.
"""

from typing import Optional, Sequence


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def population_variance(values: Sequence[float]) -> float:
    """
    Population variance (divisor N, not N-1).

    Formula: Σ(value_i - mean)² / N
    Returns 0.0 when fewer than two values are supplied.
    """
    if len(values) < 2:
        return 0.0
    m = mean(values)
    return sum((v - m) ** 2 for v in values) / len(values)


def weighted_mean(values: Sequence[float], weights: Sequence[float]) -> float:
    """
    Calculate weighted mean.

    Formula: Σ(value_i × weight_i) / Σ(weight_i)
    Returns 0.0 for empty input or when all weights are zero.
    """
    if len(values) != len(weights):
        raise ValueError("values and weights must have same length")
    if not values:
        return 0.0

    total_weight = sum(weights)
    if total_weight == 0:
        return 0.0

    return sum(v * w for v, w in zip(values, weights)) / total_weight


def normalized_variance_pct(variance: float, max_points: float) -> float:
    """
    Express a variance as a percentage of the squared scale.

    Formula: variance / max_points² × 100
    """
    if max_points <= 0:
        return 0.0
    return (variance / (max_points ** 2)) * 100


def exceeds_threshold(value: float, threshold: Optional[float]) -> bool:
    """Strict comparison; an unset threshold never flags."""
    if threshold is None:
        return False
    return value > threshold
