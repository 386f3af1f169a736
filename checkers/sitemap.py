"""
Sitemap checker.

Candidate URLs come from the Sitemap: lines of robots.txt (same host only,
so robots.txt cannot point the service at another origin), falling back to
the conventional locations. All candidates are fetched concurrently and the
first valid sitemap wins.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from checkers.base import CheckOutcome, failure, partial, success
from utils.errors import FetchError
from utils.safe_fetch import SafeFetcher
from utils.sanitize import sanitize_content
from utils.url_validator import host_key, origin_url

logger = logging.getLogger(__name__)

DEFAULT_LOCATIONS = ["/sitemap.xml", "/sitemap_index.xml"]

_SITEMAP_LINE = re.compile(r"Sitemap:\s*(.+)", re.IGNORECASE)
_URL_ENTRY = re.compile(r"<url>")


class InvalidSitemapError(Exception):
    """Candidate answered, but not with a usable sitemap."""


@dataclass(frozen=True)
class FoundSitemap:
    url: str
    preview: str
    urls: int
    has_urlset: bool
    has_sitemap_index: bool
    has_lastmod: bool
    has_changefreq: bool
    has_priority: bool


def sitemap_candidates(url: str, robots_content: Optional[str] = None) -> List[str]:
    """
    List sitemap URLs to try.

    Args:
        url: Page URL
        robots_content: robots.txt text, if it was fetched

    Returns:
        Same-host Sitemap: URLs from robots.txt, or the default locations
    """
    host = host_key(url)
    candidates = []

    for match in _SITEMAP_LINE.finditer(robots_content or ""):
        candidate = match.group(1).strip()
        if not candidate:
            continue
        if host is not None and host_key(candidate) == host and candidate not in candidates:
            candidates.append(candidate)

    if candidates:
        return candidates

    return [origin_url(url, path) for path in DEFAULT_LOCATIONS]


async def fetch_sitemap(sitemap_url: str, fetcher: SafeFetcher, max_bytes: int) -> FoundSitemap:
    """
    Fetch one candidate.

    Raises:
        FetchError: Fetch was blocked, failed or exceeded the size cap
        InvalidSitemapError: Non-2xx status or not sitemap XML
    """
    response = await fetcher.fetch(
        sitemap_url,
        accept="application/xml,text/xml",
        max_bytes=max_bytes,
    )
    if not response.ok:
        raise InvalidSitemapError(f"HTTP {response.status}")

    content = response.body_text
    has_urlset = "<urlset" in content
    has_sitemap_index = "<sitemapindex" in content

    if not has_urlset and not has_sitemap_index:
        raise InvalidSitemapError("Not a valid sitemap format")

    return FoundSitemap(
        url=sitemap_url,
        preview=sanitize_content(content, 500),
        urls=len(_URL_ENTRY.findall(content)),
        has_urlset=has_urlset,
        has_sitemap_index=has_sitemap_index,
        has_lastmod="<lastmod>" in content,
        has_changefreq="<changefreq>" in content,
        has_priority="<priority>" in content,
    )


async def first_valid_sitemap(
    candidates: List[str],
    fetcher: SafeFetcher,
    max_bytes: int,
) -> Tuple[Optional[FoundSitemap], List[str]]:
    """
    Race all candidates; return the first valid sitemap and the errors seen.

    Remaining fetches are cancelled once a winner is found.
    """
    tasks = [asyncio.ensure_future(fetch_sitemap(candidate, fetcher, max_bytes)) for candidate in candidates]
    errors = []

    try:
        for next_done in asyncio.as_completed(tasks):
            try:
                return await next_done, errors
            except (FetchError, InvalidSitemapError) as e:
                errors.append(str(e))
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    return None, errors


async def check_sitemap(
    url: str,
    fetcher: SafeFetcher,
    max_bytes: int,
    robots_content: Optional[str] = None,
) -> CheckOutcome:
    """
    Locate and score the sitemap.

    Deductions: -30 no <url> entries, -10 no lastmod, -10 no changefreq,
    -5 no priority.
    """
    candidates = sitemap_candidates(url, robots_content)
    found, errors = await first_valid_sitemap(candidates, fetcher, max_bytes)

    if found is None:
        logger.debug(f"No sitemap for {url}: {errors}")
        return failure("Sitemap.xml not found", {
            "checkedUrls": candidates,
            "errors": errors,
        })

    score = 100
    if not found.urls:
        score -= 30
    if not found.has_lastmod:
        score -= 10
    if not found.has_changefreq:
        score -= 10
    if not found.has_priority:
        score -= 5
    score = max(0, score)

    data = {
        "url": found.url,
        "urls": found.urls,
        "hasUrlset": found.has_urlset,
        "hasSitemapIndex": found.has_sitemap_index,
        "hasLastmod": found.has_lastmod,
        "hasChangefreq": found.has_changefreq,
        "hasPriority": found.has_priority,
        "type": "sitemapindex" if found.has_sitemap_index else "urlset",
        "preview": found.preview,
    }

    if score >= 80:
        return success(f"Sitemap found with {found.urls} URLs", score, data)

    return partial("Sitemap found but missing some optional fields", score, data)
