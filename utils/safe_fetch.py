"""
SSRF-safe fetch wrapper.

Every outbound request made by the service goes through SafeFetcher:
- the URL is re-validated (structure + DNS) immediately before each request
- automatic redirects are disabled; at most one redirect hop is followed,
  and only after its target passes the same validation
- the whole call is bounded by a deadline
- response bodies are capped, both by declared Content-Length and by the
  number of bytes actually streamed

No retries are performed.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Optional
from urllib.parse import urljoin

import httpx

from config import Settings, settings
from utils.dns_guard import Resolver, is_safe_url_with_dns
from utils.errors import (
    FetchBlockedError,
    FetchTimeoutError,
    NetworkFetchError,
    RedirectNotAllowedError,
    ResponseTooLargeError,
)


logger = logging.getLogger(__name__)


class RedirectPolicy(str, Enum):
    """How SafeFetcher treats a 3xx response carrying a Location header."""
    FOLLOW_NONE = "follow_none"
    FOLLOW_ONE_REVALIDATED = "follow_one_revalidated"


@dataclass(frozen=True)
class FetchOutcome:
    """
    Result of a completed fetch.

    Attributes:
        url: Final URL (the redirect target if one hop was followed)
        status: HTTP status code of the final response
        body_text: Decoded response body (empty for unfollowed redirects)
        bytes_read: Number of body bytes read
        elapsed_ms: Total wall-clock time including validation and redirects
        ttfb_ms: Time from sending the final request to receiving its headers
        headers: Response headers (lowercased keys)
        redirected: True if a redirect hop was followed
    """
    url: str
    status: int
    body_text: str
    bytes_read: int
    elapsed_ms: int
    ttfb_ms: int
    headers: Dict[str, str] = field(default_factory=dict)
    redirected: bool = False

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def location(self) -> Optional[str]:
        if 300 <= self.status < 400:
            return self.headers.get("location")
        return None


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


class SafeFetcher:
    """
    Fetches URLs under SSRF, redirect, time and size constraints.

    Args:
        timeout: Deadline in seconds for one fetch() call, redirects included
        dns_timeout: Deadline in seconds for each DNS guard lookup
        max_bytes: Default response body cap
        user_agent: User-Agent header sent with every request
        resolver: Optional DNS resolver override (see utils.dns_guard)
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        timeout: float = 10.0,
        dns_timeout: float = 5.0,
        max_bytes: int = 5 * 1024 * 1024,
        user_agent: str = "Mozilla/5.0 (compatible; AISearchChecker/1.0)",
        resolver: Optional[Resolver] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.dns_timeout = dns_timeout
        self.max_bytes = max_bytes
        self.user_agent = user_agent
        self.resolver = resolver
        self.transport = transport

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None, **overrides) -> "SafeFetcher":
        config = config or settings
        options = {
            "timeout": config.request_timeout_seconds,
            "dns_timeout": config.dns_timeout_seconds,
            "max_bytes": config.max_page_bytes,
            "user_agent": config.user_agent,
        }
        options.update(overrides)
        return cls(**options)

    async def is_allowed(self, url: str) -> bool:
        """Structural + DNS check. Call immediately before each request."""
        allowed = await is_safe_url_with_dns(url, timeout=self.dns_timeout, resolver=self.resolver)
        if not allowed:
            logger.warning(f"Blocked outbound fetch to {url}")
        return allowed

    async def fetch(
        self,
        url: str,
        policy: RedirectPolicy = RedirectPolicy.FOLLOW_ONE_REVALIDATED,
        accept: str = "*/*",
        max_bytes: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> FetchOutcome:
        """
        Fetch a URL safely.

        Args:
            url: Absolute http(s) URL
            policy: Redirect handling policy
            accept: Accept header value
            max_bytes: Body cap override for this call
            timeout: Deadline override for this call

        Returns:
            FetchOutcome for any non-redirect status (callers decide what
            a 404 or 500 means for them)

        Raises:
            FetchBlockedError: URL or redirect target failed validation
            RedirectNotAllowedError: A second redirect was returned
            ResponseTooLargeError: Body exceeded the cap
            FetchTimeoutError: Deadline expired
            NetworkFetchError: Connection or protocol failure
        """
        limit = max_bytes or self.max_bytes
        deadline = timeout or self.timeout
        started = time.perf_counter()

        try:
            return await asyncio.wait_for(
                self._fetch(url, policy, accept, limit, started),
                timeout=deadline,
            )
        except asyncio.TimeoutError:
            raise FetchTimeoutError(
                f"Request timed out after {deadline:g}s", url, _elapsed_ms(started)
            ) from None
        except httpx.TimeoutException as e:
            raise FetchTimeoutError(
                f"Request timed out: {e}", url, _elapsed_ms(started)
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkFetchError(
                f"Network error: {e}", url, _elapsed_ms(started)
            ) from e

    async def _fetch(
        self,
        url: str,
        policy: RedirectPolicy,
        accept: str,
        limit: int,
        started: float,
    ) -> FetchOutcome:
        if not await self.is_allowed(url):
            raise FetchBlockedError("URL not allowed", url, _elapsed_ms(started))

        headers = {"User-Agent": self.user_agent, "Accept": accept}
        async with httpx.AsyncClient(
            follow_redirects=False,
            timeout=self.timeout,
            headers=headers,
            transport=self.transport,
        ) as client:
            outcome = await self._request(client, url, limit, started)

            location = outcome.location
            if not location or policy is RedirectPolicy.FOLLOW_NONE:
                return outcome

            target = urljoin(url, location)
            if not await self.is_allowed(target):
                logger.warning(f"Redirect from {url} to unsafe target {target} blocked")
                raise FetchBlockedError(
                    "Redirect to unsafe URL blocked", target, _elapsed_ms(started)
                )

            followed = await self._request(client, target, limit, started)
            if followed.location:
                raise RedirectNotAllowedError(
                    f"Redirect chain not allowed ({target} redirected again)",
                    target,
                    _elapsed_ms(started),
                )
            return replace(followed, redirected=True)

    async def _request(
        self,
        client: httpx.AsyncClient,
        url: str,
        limit: int,
        started: float,
    ) -> FetchOutcome:
        sent = time.perf_counter()
        async with client.stream("GET", url) as response:
            ttfb_ms = _elapsed_ms(sent)
            headers = {k.lower(): v for k, v in response.headers.items()}

            if 300 <= response.status_code < 400 and "location" in headers:
                # Redirect bodies are never read
                return FetchOutcome(
                    url=url,
                    status=response.status_code,
                    body_text="",
                    bytes_read=0,
                    elapsed_ms=_elapsed_ms(started),
                    ttfb_ms=ttfb_ms,
                    headers=headers,
                )

            declared = headers.get("content-length", "")
            if declared.isdigit() and int(declared) > limit:
                raise ResponseTooLargeError(
                    f"Response too large ({declared} bytes, limit {limit})",
                    url,
                    _elapsed_ms(started),
                )

            # Content-Length may be absent or wrong; count what actually arrives
            chunks = []
            bytes_read = 0
            async for chunk in response.aiter_bytes():
                bytes_read += len(chunk)
                if bytes_read > limit:
                    raise ResponseTooLargeError(
                        f"Response exceeded {limit} bytes",
                        url,
                        _elapsed_ms(started),
                    )
                chunks.append(chunk)

            return FetchOutcome(
                url=url,
                status=response.status_code,
                body_text=_decode(b"".join(chunks), response.charset_encoding),
                bytes_read=bytes_read,
                elapsed_ms=_elapsed_ms(started),
                ttfb_ms=ttfb_ms,
                headers=headers,
            )


def _decode(body: bytes, encoding: Optional[str]) -> str:
    try:
        return body.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")
