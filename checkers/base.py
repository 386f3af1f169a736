"""
Shared result type and constructors for the readiness checkers.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup


@dataclass(frozen=True)
class CheckOutcome:
    """
    Result of one readiness check.

    Attributes:
        found: Whether the checked feature is present
        score: Score from 0 to 100
        details: Human-readable summary
        data: Check-specific evidence
        warnings: Optional list of issues worth fixing
    """
    found: bool
    score: int
    details: str
    data: Dict[str, Any] = field(default_factory=dict)
    warnings: Optional[List[str]] = None


def success(
    details: str,
    score: int,
    data: Optional[Dict[str, Any]] = None,
    warnings: Optional[List[str]] = None,
) -> CheckOutcome:
    """Feature found and in good shape."""
    return CheckOutcome(
        found=True,
        score=score,
        details=details,
        data=data or {},
        warnings=warnings or None,
    )


def failure(details: str, data: Optional[Dict[str, Any]] = None) -> CheckOutcome:
    """Feature missing. Score is always 0."""
    return CheckOutcome(found=False, score=0, details=details, data=data or {})


def partial(
    details: str,
    score: int,
    data: Optional[Dict[str, Any]] = None,
    warnings: Optional[List[str]] = None,
) -> CheckOutcome:
    """Feature partly present; counts as found when anything scored."""
    return CheckOutcome(
        found=score > 0,
        score=score,
        details=details,
        data=data or {},
        warnings=warnings or None,
    )


def degraded(check_name: str, message: str) -> CheckOutcome:
    """Default outcome substituted for a check that raised."""
    return CheckOutcome(
        found=False,
        score=0,
        details=f"Check failed: {check_name}",
        data={"error": message},
    )


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, 'lxml')


def clamp_score(score: int) -> int:
    return max(0, min(100, score))
