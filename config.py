"""
Configuration management for the AI Search Readiness Checker.

All environment variables are loaded here with their default values.
Every limit the fetch core and rate limiter enforce is configurable.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment Variable Reference:
    - RATE_LIMIT_REQUESTS: Requests allowed per client per window
    - RATE_LIMIT_WINDOW_SECONDS: Length of the fixed rate-limit window
    - REQUEST_TIMEOUT_SECONDS: Deadline for each outbound fetch
    - MAX_PAGE_BYTES: Body cap for the target page
    - TRUST_FORWARDED_FOR: Only enable behind a proxy that appends X-Forwarded-For
    """

    # Application settings
    app_name: str = "AI Search Readiness Checker"
    app_version: str = "1.0.0"
    debug: bool = False

    # Rate limiting (fixed window per client)
    rate_limit_requests: int = 10
    rate_limit_window_seconds: int = 60
    rate_limit_cleanup_interval_seconds: int = 300  # Sweep expired windows every 5 minutes
    rate_limit_max_entries: int = 100_000  # Hard cap against IP flooding

    # Outbound fetch limits
    request_timeout_seconds: float = 10.0
    dns_timeout_seconds: float = 5.0
    max_page_bytes: int = 5 * 1024 * 1024
    max_auxiliary_bytes: int = 1024 * 1024  # robots.txt, llms.txt
    max_sitemap_bytes: int = 5 * 1024 * 1024
    user_agent: str = "Mozilla/5.0 (compatible; AISearchChecker/1.0)"

    # Client identification
    # When True, the LAST X-Forwarded-For entry (appended by our own proxy) is
    # used as the client key. Never enable without a trusted proxy in front.
    trust_forwarded_for: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:3000"]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()


def get_limits_summary(config: Optional[Settings] = None) -> dict:
    """
    Returns the effective request limits.
    Used by the health endpoint.
    """
    config = config or settings
    return {
        "rate_limit_requests": config.rate_limit_requests,
        "rate_limit_window_seconds": config.rate_limit_window_seconds,
        "request_timeout_seconds": config.request_timeout_seconds,
        "max_page_bytes": config.max_page_bytes,
    }
