"""
Check orchestrator.

Runs one analysis end to end:
1. Target validation (structure + DNS) → 400 on failure
2. Primary page fetch through SafeFetcher → 400 on failure or non-2xx
3. Phase 1: robots.txt (its Sitemap: lines feed the sitemap check)
4. Phase 2: the remaining nine checks concurrently
5. Aggregation into the response

Every check runs behind the same wrapping combinator, so a failing check
degrades to a zero-score default instead of failing the request.
"""

import asyncio
import functools
import inspect
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional
from urllib.parse import urlparse

from checkers import (
    check_author_authority,
    check_faq_blocks,
    check_heading_hierarchy,
    check_llms_txt,
    check_open_graph,
    check_page_speed,
    check_robots_txt,
    check_schema,
    check_semantic_html,
    check_sitemap,
)
from checkers.base import CheckOutcome, degraded
from config import Settings, settings
from evaluators.scoring import generate_check_response
from models.enums import CheckName
from models.schemas import CheckResponse
from utils.dns_guard import resolves_safely
from utils.errors import DNSResolutionError, FetchError, HTTPStatusFetchError, SSRFBlockedError, URLValidationError, describe_error
from utils.safe_fetch import FetchOutcome, SafeFetcher
from utils.url_validator import check_hostname, validate_url

logger = logging.getLogger(__name__)

PAGE_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


@dataclass(frozen=True)
class CheckRun:
    """
    Result of running one check through the combinator.

    Attributes:
        name: Check that ran
        outcome: Check outcome, or the degraded default
        degraded: True if the check raised
        error: Description of the exception when degraded
    """
    name: CheckName
    outcome: CheckOutcome
    degraded: bool = False
    error: Optional[str] = None


class CheckOrchestrator:
    """
    Runs the ten readiness checks for one URL.

    Args:
        fetcher: Safe fetch wrapper used for every outbound request
        config: Settings providing byte caps and timeouts
    """

    def __init__(self, fetcher: Optional[SafeFetcher] = None, config: Optional[Settings] = None):
        self.config = config or settings
        self.fetcher = fetcher or SafeFetcher.from_settings(self.config)

    async def run(self, raw_url: str) -> CheckResponse:
        """
        Analyze a URL.

        Args:
            raw_url: URL as submitted by the client

        Returns:
            CheckResponse with all ten checks

        Raises:
            URLValidationError: Malformed URL or disallowed scheme
            SSRFBlockedError: Private, loopback or unresolvable target
            FetchError: Primary page fetch failed or returned non-2xx
        """
        url = await self.validate_target(raw_url)
        logger.info(f"Checking {url}")

        page = await self.fetch_page(url)
        html = page.body_text

        # Phase 1
        robots = await self._run_check(
            CheckName.ROBOTS_TXT, check_robots_txt, url, self.fetcher, self.config.max_auxiliary_bytes
        )
        robots_content = robots.outcome.data.get("content")

        # Phase 2
        runs: List[CheckRun] = await asyncio.gather(
            self._run_check(CheckName.SCHEMA, check_schema, url, html),
            self._run_check(
                CheckName.LLMS_TXT, check_llms_txt, url, self.fetcher, self.config.max_auxiliary_bytes
            ),
            self._run_check(
                CheckName.SITEMAP, check_sitemap, url, self.fetcher, self.config.max_sitemap_bytes, robots_content
            ),
            self._run_check(CheckName.OPEN_GRAPH, check_open_graph, html),
            self._run_check(CheckName.SEMANTIC_HTML, check_semantic_html, html),
            self._run_check(CheckName.HEADING_HIERARCHY, check_heading_hierarchy, html),
            self._run_check(CheckName.FAQ_BLOCKS, check_faq_blocks, html),
            self._run_check(CheckName.PAGE_SPEED, check_page_speed, page.ttfb_ms),
            self._run_check(CheckName.AUTHOR_AUTHORITY, check_author_authority, html),
        )
        runs.insert(0, robots)

        degraded_names = [run.name.value for run in runs if run.degraded]
        if degraded_names:
            logger.warning(f"{len(degraded_names)} check(s) degraded for {url}: {', '.join(degraded_names)}")

        response = generate_check_response(url, {run.name: run.outcome for run in runs})
        logger.info(f"Check complete for {url}: {response.overall_score} ({response.grade.value})")
        return response

    async def validate_target(self, raw_url: str) -> str:
        """
        Normalize and validate the submitted URL, including a DNS check.

        Returns:
            Normalized URL

        Raises:
            URLValidationError: Malformed URL or disallowed scheme
            SSRFBlockedError: Hostname is loopback or private
            DNSResolutionError: Hostname does not resolve to a public address
        """
        is_valid, url, message = validate_url(raw_url)

        if not is_valid:
            hostname = _hostname(url)
            if hostname and not check_hostname(hostname).allowed:
                logger.warning(f"Blocked SSRF attempt: {raw_url!r} ({message})")
                raise SSRFBlockedError(f"URL not allowed: {message}")
            raise URLValidationError(message or "Invalid URL")

        hostname = _hostname(url)
        if not await resolves_safely(hostname, timeout=self.fetcher.dns_timeout, resolver=self.fetcher.resolver):
            logger.warning(f"Blocked target {url}: DNS check failed")
            raise DNSResolutionError(
                "URL not allowed: hostname could not be resolved to a public address"
            )

        return url

    async def fetch_page(self, url: str) -> FetchOutcome:
        """
        Primary fetch of the target page.

        Raises:
            FetchError: Any fetch failure, or HTTPStatusFetchError for non-2xx
        """
        page = await self.fetcher.fetch(url, accept=PAGE_ACCEPT, max_bytes=self.config.max_page_bytes)

        if not page.ok:
            raise HTTPStatusFetchError(
                f"Failed to fetch URL: HTTP {page.status}", url, page.status, page.elapsed_ms
            )

        logger.debug(f"Fetched {url}: {page.bytes_read} bytes, ttfb {page.ttfb_ms}ms, total {page.elapsed_ms}ms")
        return page

    async def _run_check(self, name: CheckName, check: Callable, *args) -> CheckRun:
        """
        Run one check, converting any exception into the degraded default.

        Coroutine functions are awaited; plain functions (HTML parsing)
        run in the default executor to keep the event loop free.
        """
        try:
            if inspect.iscoroutinefunction(check):
                outcome = await check(*args)
            else:
                loop = asyncio.get_running_loop()
                outcome = await loop.run_in_executor(None, functools.partial(check, *args))
        except FetchError as e:
            error = describe_error(e)
            logger.warning(f"Check {name.value} could not fetch {e.url}: {error} ({e.elapsed_ms}ms)")
            return CheckRun(name=name, outcome=degraded(name.value, error), degraded=True, error=error)
        except Exception as e:
            error = describe_error(e)
            logger.exception(f"Check {name.value} failed: {error}")
            return CheckRun(name=name, outcome=degraded(name.value, error), degraded=True, error=error)

        return CheckRun(name=name, outcome=outcome)


def _hostname(url: str) -> Optional[str]:
    try:
        return urlparse(url).hostname
    except ValueError:
        return None
