"""
Exception taxonomy for the checker service.

Every error carries the HTTP status and machine-readable code it maps to,
so the API layer can translate failures without inspecting messages.
Fetch errors additionally carry the elapsed time of the failed attempt.
"""


class CheckerAppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 400
    error_code: str = "BAD_REQUEST"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class URLValidationError(CheckerAppError):
    """Malformed or disallowed URL syntax."""
    error_code = "INVALID_URL"


class SSRFBlockedError(CheckerAppError):
    """Target is, or resolves to, a private or reserved address."""
    error_code = "URL_NOT_ALLOWED"


class DNSResolutionError(SSRFBlockedError):
    """Resolution timed out or failed. Treated exactly like a blocked target."""
    error_code = "DNS_RESOLUTION_FAILED"


class RateLimitedError(CheckerAppError):
    """Admission denied by the rate limiter."""

    status_code = 429
    error_code = "RATE_LIMITED"

    def __init__(self, message: str, retry_after: int, limit: int):
        super().__init__(message)
        self.retry_after = retry_after
        self.limit = limit


class FetchError(CheckerAppError):
    """
    Base class for outbound fetch failures.

    Attributes:
        url: URL that was being fetched
        elapsed_ms: Wall-clock time spent before the failure
    """
    error_code = "FETCH_FAILED"

    def __init__(self, message: str, url: str, elapsed_ms: int = 0):
        super().__init__(message)
        self.url = url
        self.elapsed_ms = elapsed_ms


class FetchBlockedError(FetchError):
    """A URL or redirect target failed the safety checks."""
    error_code = "FETCH_BLOCKED"


class FetchTimeoutError(FetchError):
    """The fetch deadline expired."""
    error_code = "FETCH_TIMEOUT"


class ResponseTooLargeError(FetchError):
    """The response body exceeded the configured byte cap."""
    error_code = "RESPONSE_TOO_LARGE"


class NetworkFetchError(FetchError):
    """Connection, TLS or protocol failure."""
    error_code = "NETWORK_ERROR"


class RedirectNotAllowedError(FetchError):
    """A redirect appeared where no further hops are permitted."""
    error_code = "TOO_MANY_REDIRECTS"


class HTTPStatusFetchError(FetchError):
    """The target answered with a non-success status."""
    error_code = "HTTP_ERROR"

    def __init__(self, message: str, url: str, status: int, elapsed_ms: int = 0):
        super().__init__(message, url, elapsed_ms)
        self.status = status


def describe_error(exc: BaseException) -> str:
    """Short, log-safe description of an exception."""
    text = str(exc).strip()
    if text:
        return f"{type(exc).__name__}: {text}"
    return type(exc).__name__
