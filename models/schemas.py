"""
Pydantic schemas for the AI Search Readiness Checker API.

Defines request and response models with strict validation.
Responses are serialized with camelCase keys (overallScore, retryAfter, ...).
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .enums import Grade, Priority


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckRequest(BaseModel):
    """Request schema for POST /api/check."""
    url: str = Field(
        ...,
        min_length=1,
        max_length=2048,
        description="Website URL to analyze (https:// is assumed when no scheme is given)"
    )

    @field_validator('url')
    @classmethod
    def strip_url(cls, v: str) -> str:
        """Trim whitespace; blank URLs are rejected."""
        v = v.strip()
        if not v:
            raise ValueError("URL is required")
        return v


class CheckResultSchema(CamelModel):
    """Outcome of a single readiness check."""
    found: bool = Field(..., description="Whether the checked feature is present")
    score: int = Field(..., ge=0, le=100, description="Check score (0-100)")
    details: str = Field(..., description="Human-readable summary")
    data: Dict[str, Any] = Field(default_factory=dict, description="Check-specific evidence")
    warnings: Optional[List[str]] = Field(None, description="Issues worth fixing")


class RecommendationSchema(CamelModel):
    """Actionable recommendation derived from weak checks."""
    priority: Priority
    category: str
    message: str
    action: str


class CheckSummary(CamelModel):
    """Per-status check counts (passed >= 70, warning 50-69, failed < 50)."""
    passed: int = Field(..., ge=0)
    warning: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    total: int = Field(..., ge=0)


class CheckResponse(CamelModel):
    """
    Response schema for POST /api/check.

    `checks` is keyed by check name (schema, robotsTxt, llmsTxt, ...) and
    always holds all ten entries, including degraded ones.
    """
    url: str = Field(..., description="Normalized URL that was analyzed")
    overall_score: int = Field(..., ge=0, le=100, description="Weighted overall score (0-100)")
    grade: Grade = Field(..., description="excellent | good | fair | poor")
    checks: Dict[str, CheckResultSchema] = Field(..., description="Per-check results")
    recommendations: List[RecommendationSchema] = Field(default_factory=list)
    summary: CheckSummary


class HealthResponse(CamelModel):
    """Response schema for GET /health."""
    status: str = Field(default="healthy", description="Overall health status")
    version: str = Field(..., description="API version")
    limits: Dict[str, Any] = Field(..., description="Effective request limits")


class ErrorResponse(CamelModel):
    """Standardized error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: Optional[str] = Field(None, description="Machine-readable error code")
    retry_after: Optional[int] = Field(None, description="Seconds to wait before retrying (429 only)")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "error": "Too many requests. Please try again later.",
                "errorCode": "RATE_LIMITED",
                "retryAfter": 42,
            }
        },
    )
