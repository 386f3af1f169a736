"""
Deterministic rounding utilities.

This module provides the round_half_up function and the score-to-label
mappings so that scoring is consistent and reproducible across runs.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Mapping, Tuple, Union

from models.enums import CheckStatus, Grade, GRADE_THRESHOLDS, STATUS_THRESHOLDS


def round_half_up(value: Union[float, Decimal]) -> int:
    """
    Round a number to an integer using "round half up" strategy.

    This ensures deterministic rounding where 0.5 always rounds up,
    avoiding Python's default banker's rounding.

    Args:
        value: Number to round

    Returns:
        Rounded integer

    Examples:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(3.5)
        4
        >>> round_half_up(2.4)
        2
    """
    d = value if isinstance(value, Decimal) else Decimal(str(value))
    return int(d.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_weighted_score(scores: Mapping[str, int], weights: Iterable[Tuple[str, int]]) -> int:
    """
    Compute the overall score from per-check scores.

    Formula:
        overall = round_half_up(sum(score × weight / 100))

    Checks missing from `scores` contribute 0.

    Args:
        scores: Check name to score (0-100)
        weights: (check name, weight) pairs; weights sum to 100

    Returns:
        Overall score as integer (0-100)

    Examples:
        >>> compute_weighted_score({"a": 100, "b": 50}, [("a", 20), ("b", 10)])
        25
    """
    # Sum in Decimal so that x.5 totals are not skewed by float error
    total = Decimal(0)
    for name, weight in weights:
        total += Decimal(scores.get(name, 0)) * Decimal(weight) / Decimal(100)

    overall = round_half_up(total)
    return max(0, min(100, overall))


def compute_grade(total_score: int) -> Grade:
    """
    Map overall score to grade.

    Deterministic mapping:
        90-100: excellent
        70-89: good
        50-69: fair
        0-49: poor
    """
    for threshold, grade in GRADE_THRESHOLDS:
        if total_score >= threshold:
            return grade
    return Grade.POOR


def classify_status(score: int) -> CheckStatus:
    """Map a single check score to passed / warning / failed."""
    if score >= STATUS_THRESHOLDS["pass_min"]:
        return CheckStatus.PASSED
    elif score >= STATUS_THRESHOLDS["warn_min"]:
        return CheckStatus.WARNING
    return CheckStatus.FAILED
