"""Utilities package for the AI Search Readiness Checker."""

from .url_validator import validate_url, normalize_url, is_safe_url, check_url
from .dns_guard import resolves_safely, is_safe_url_with_dns
from .safe_fetch import SafeFetcher, FetchOutcome, RedirectPolicy
from .rate_limiter import RateLimiter, RateLimitDecision
from .rounding import round_half_up, compute_weighted_score
from .sanitize import sanitize_content

__all__ = [
    "validate_url",
    "normalize_url",
    "is_safe_url",
    "check_url",
    "resolves_safely",
    "is_safe_url_with_dns",
    "SafeFetcher",
    "FetchOutcome",
    "RedirectPolicy",
    "RateLimiter",
    "RateLimitDecision",
    "round_half_up",
    "compute_weighted_score",
    "sanitize_content",
]
