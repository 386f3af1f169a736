"""
Page speed checker.

Scores the time to first byte measured during the primary page fetch, so
the target is never requested twice.
"""

from checkers.base import CheckOutcome, success

# (upper bound in ms, score, label); slower than the last bound scores 20
SPEED_THRESHOLDS = [
    (1000, 100, "excellent"),
    (2000, 80, "good"),
    (3000, 60, "fair"),
    (5000, 40, "slow"),
]
SLOWEST_SCORE = 20
SLOWEST_LABEL = "very slow"

SLOW_WARNING_MS = 3000


def check_page_speed(ttfb_ms: int) -> CheckOutcome:
    """
    Score server response time.

    Args:
        ttfb_ms: Time to first byte of the primary fetch in milliseconds

    Returns:
        CheckOutcome (always found)
    """
    score, label = SLOWEST_SCORE, SLOWEST_LABEL
    for bound, bound_score, bound_label in SPEED_THRESHOLDS:
        if ttfb_ms < bound:
            score, label = bound_score, bound_label
            break

    warnings = []
    if ttfb_ms > SLOW_WARNING_MS:
        warnings.append("Page is slow, needs optimization")

    return success(
        f"Server responded in {ttfb_ms}ms ({label})",
        score,
        {
            "loadTime": ttfb_ms,
            "label": label,
            "note": "Measured as server response time (TTFB). Use Google PSI API for full load metrics.",
        },
        warnings,
    )
