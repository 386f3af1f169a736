"""Models package for the AI Search Readiness Checker."""

from .schemas import (
    CheckRequest,
    CheckResponse,
    CheckResultSchema,
    CheckSummary,
    RecommendationSchema,
    HealthResponse,
    ErrorResponse,
)
from .enums import (
    CheckName,
    CheckStatus,
    Grade,
    Priority,
    CHECK_WEIGHTS,
)

__all__ = [
    "CheckRequest",
    "CheckResponse",
    "CheckResultSchema",
    "CheckSummary",
    "RecommendationSchema",
    "HealthResponse",
    "ErrorResponse",
    "CheckName",
    "CheckStatus",
    "Grade",
    "Priority",
    "CHECK_WEIGHTS",
]
