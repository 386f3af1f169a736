"""
AI Search Readiness Checker - FastAPI Application

Fetches a website and scores how ready it is for AI search engines:
- Schema.org, robots.txt, llms.txt, sitemap, Open Graph
- Semantic HTML, headings, FAQ blocks, page speed, author authority

Environment Variables:
    See config.py for complete list and descriptions.
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings, get_limits_summary
from models.schemas import (
    CheckRequest,
    CheckResponse,
    HealthResponse,
    ErrorResponse,
)
from evaluators.orchestrator import CheckOrchestrator
from utils.errors import CheckerAppError, FetchError, RateLimitedError, SSRFBlockedError
from utils.rate_limiter import RateLimitDecision, RateLimiter

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    app.state.rate_limiter = RateLimiter.from_settings(settings)
    app.state.orchestrator = CheckOrchestrator(config=settings)

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Limits: {get_limits_summary()}")
    yield
    logger.info("Shutting down...")
    app.state.rate_limiter.close()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Scores websites on readiness for AI search engines",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_content(error: ErrorResponse) -> dict:
    return error.model_dump(by_alias=True, exclude_none=True)


# Error handlers
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Handle request body validation errors."""
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    message = errors[0]["msg"] if errors else "Invalid input data"
    return JSONResponse(
        status_code=400,
        content=_error_content(ErrorResponse(
            error=f"Invalid request: {message}",
            error_code="VALIDATION_ERROR",
            details={"errors": errors},
        )),
    )


@app.exception_handler(CheckerAppError)
async def checker_error_handler(request: Request, exc: CheckerAppError):
    """Handle typed service errors (validation, SSRF, fetch, rate limit)."""
    headers = {}
    retry_after = None

    if isinstance(exc, RateLimitedError):
        retry_after = exc.retry_after
        headers = {
            "Retry-After": str(exc.retry_after),
            "X-RateLimit-Limit": str(exc.limit),
            "X-RateLimit-Remaining": "0",
        }
    elif isinstance(exc, SSRFBlockedError):
        logger.warning(f"Rejected target from {client_key(request)}: {exc.message}")
    elif isinstance(exc, FetchError):
        logger.info(f"Primary fetch failed for {exc.url}: {exc.message} ({exc.elapsed_ms}ms)")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(ErrorResponse(
            error=exc.message,
            error_code=exc.error_code,
            retry_after=retry_after,
        )),
        headers=headers or None,
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content=_error_content(ErrorResponse(
            error="An unexpected error occurred. Please try again.",
            error_code="INTERNAL_ERROR",
        )),
    )


# Dependencies
def client_key(request: Request) -> str:
    """
    Identify the client for rate limiting.

    Uses the socket peer address. When TRUST_FORWARDED_FOR is enabled, the
    last X-Forwarded-For entry is used instead: that is the hop appended by
    our own proxy, while earlier entries are client-controlled.
    """
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        last_hop = forwarded.split(",")[-1].strip()
        if last_hop:
            return last_hop
    return request.client.host if request.client else "unknown"


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_orchestrator(request: Request) -> CheckOrchestrator:
    return request.app.state.orchestrator


async def enforce_rate_limit(
    request: Request,
    response: Response,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> RateLimitDecision:
    """Admission control. Raises RateLimitedError (429) when over the limit."""
    key = client_key(request)
    decision = limiter.check(key)

    if not decision.allowed:
        raise RateLimitedError(
            "Too many requests. Please try again later.",
            retry_after=decision.retry_after,
            limit=limiter.limit,
        )

    response.headers["X-RateLimit-Limit"] = str(limiter.limit)
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
    return decision


# Health endpoint
@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Health check endpoint",
)
async def health_check() -> HealthResponse:
    """Check API health and report the effective request limits."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        limits=get_limits_summary(),
    )


# Main check endpoint
@app.post(
    "/api/check",
    response_model=CheckResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid, blocked or unreachable URL"},
        429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    tags=["Checker"],
    summary="Check a website's AI search readiness",
)
async def check_website(
    body: CheckRequest,
    decision: RateLimitDecision = Depends(enforce_rate_limit),
    orchestrator: CheckOrchestrator = Depends(get_orchestrator),
) -> CheckResponse:
    """
    Analyze a website and compute its AI search readiness score.

    **Scoring Model (weights sum to 100):**
    - Schema.org 20, robots.txt 15, llms.txt 15, Open Graph 15, sitemap 10
    - Semantic HTML, headings, FAQ, page speed, author authority: 5 each

    **Grades:**
    - excellent (90-100), good (70-89), fair (50-69), poor (0-49)
    """
    logger.info(f"Check request received ({decision.remaining} requests left in window)")
    return await orchestrator.run(body.url)


# Root endpoint
@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint."""
    return {"message": f"{settings.app_name} API", "docs": "/docs", "health": "/health"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
