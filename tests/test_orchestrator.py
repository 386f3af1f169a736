"""
Tests for the check orchestrator.

The target site is served by httpx.MockTransport and DNS is stubbed.
"""

import logging
from unittest.mock import patch

import httpx
import pytest

from config import Settings
from evaluators.orchestrator import CheckOrchestrator
from models.enums import CheckName
from utils.errors import (
    DNSResolutionError,
    FetchBlockedError,
    HTTPStatusFetchError,
    SSRFBlockedError,
    URLValidationError,
)
from utils.safe_fetch import SafeFetcher

PAGE = """<!DOCTYPE html>
<html>
<head><title>Plain page</title></head>
<body>
<h1>Welcome</h1>
<h2>Details</h2>
<p>Plain content.</p>
</body>
</html>
"""


def make_orchestrator(routes, resolver_map=None):
    """Orchestrator over a mock site; paths not in `routes` return 404."""
    requested = []

    def handler(request):
        requested.append(request.url.path)
        route = routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="Not Found")
        if isinstance(route, Exception):
            raise route
        return route

    async def resolver(hostname):
        return (resolver_map or {}).get(hostname, "93.184.216.34")

    fetcher = SafeFetcher(resolver=resolver, transport=httpx.MockTransport(handler))
    orchestrator = CheckOrchestrator(fetcher=fetcher, config=Settings())
    return orchestrator, requested


class TestTargetValidation:
    """Tests for validate_target."""

    @pytest.mark.asyncio
    async def test_normalizes_url(self):
        orchestrator, _ = make_orchestrator({})
        assert await orchestrator.validate_target("Example.com/") == "https://example.com"

    @pytest.mark.asyncio
    async def test_bad_scheme_is_validation_error(self):
        orchestrator, _ = make_orchestrator({})
        with pytest.raises(URLValidationError):
            await orchestrator.validate_target("ftp://example.com")

    @pytest.mark.asyncio
    async def test_private_target_blocked(self):
        orchestrator, requested = make_orchestrator({})
        with pytest.raises(SSRFBlockedError):
            await orchestrator.validate_target("http://0x7f.0.0.1/")
        assert requested == []

    @pytest.mark.asyncio
    async def test_rebinding_target_blocked(self):
        orchestrator, _ = make_orchestrator({}, resolver_map={"example.com": "192.168.1.10"})
        with pytest.raises(DNSResolutionError):
            await orchestrator.validate_target("https://example.com")


class TestPrimaryFetch:
    """Primary fetch failures are terminal."""

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self):
        orchestrator, _ = make_orchestrator({"/": httpx.Response(500, text="error")})
        with pytest.raises(HTTPStatusFetchError) as exc_info:
            await orchestrator.run("https://example.com")
        assert exc_info.value.status == 500

    @pytest.mark.asyncio
    async def test_redirect_to_internal_raises(self):
        orchestrator, _ = make_orchestrator(
            {"/": httpx.Response(302, headers={"Location": "http://10.0.0.1/"})}
        )
        with pytest.raises(FetchBlockedError):
            await orchestrator.run("https://example.com")


class TestRun:
    """End-to-end orchestration against a mock site."""

    @pytest.mark.asyncio
    async def test_plain_page(self):
        """One H1 + one H2, no schema, nothing else on the site."""
        orchestrator, requested = make_orchestrator({"/": httpx.Response(200, html=PAGE)})
        response = await orchestrator.run("https://example.com")

        assert set(response.checks) == {name.value for name in CheckName}
        assert response.checks["headingHierarchy"].score == 100
        assert response.checks["schema"].score == 0
        assert response.checks["pageSpeed"].score == 100

        expected = round(
            response.checks["headingHierarchy"].score * 5 / 100
            + response.checks["pageSpeed"].score * 5 / 100
        )
        assert response.overall_score == expected == 10
        assert response.grade.value == "poor"
        assert response.summary.total == 10

        # robots.txt is fetched before any phase-2 fetch
        assert requested[0] == "/"
        assert requested[1] == "/robots.txt"
        assert {"/llms.txt", "/sitemap.xml", "/sitemap_index.xml"} <= set(requested)

    @pytest.mark.asyncio
    async def test_throwing_check_is_degraded(self):
        """A phase-2 check that raises scores 0; the other nine are unaffected."""
        orchestrator, _ = make_orchestrator({"/": httpx.Response(200, html=PAGE)})

        with patch("evaluators.orchestrator.check_faq_blocks", side_effect=RuntimeError("parser exploded")):
            response = await orchestrator.run("https://example.com")

        assert len(response.checks) == 10
        faq = response.checks["faqBlocks"]
        assert faq.found is False
        assert faq.score == 0
        assert faq.details == "Check failed: faqBlocks"
        assert "parser exploded" in faq.data["error"]
        assert response.checks["headingHierarchy"].score == 100

    @pytest.mark.asyncio
    async def test_throwing_robots_check_is_degraded(self):
        orchestrator, _ = make_orchestrator({"/": httpx.Response(200, html=PAGE)})

        async def broken_robots(*args):
            raise ValueError("bad")

        with patch("evaluators.orchestrator.check_robots_txt", new=broken_robots):
            response = await orchestrator.run("https://example.com")

        assert response.checks["robotsTxt"].details == "Check failed: robotsTxt"
        assert len(response.checks) == 10

    @pytest.mark.asyncio
    async def test_fetch_failure_in_check_logged_without_traceback(self, caplog):
        orchestrator, _ = make_orchestrator({
            "/": httpx.Response(200, html=PAGE),
            "/llms.txt": httpx.ConnectError("connection refused"),
        })

        with caplog.at_level(logging.WARNING, logger="evaluators.orchestrator"):
            response = await orchestrator.run("https://example.com")

        assert response.checks["llmsTxt"].details == "Check failed: llmsTxt"
        records = [r for r in caplog.records if "llmsTxt" in r.getMessage()]
        assert records
        assert all(r.levelno == logging.WARNING and r.exc_info is None for r in records)

    @pytest.mark.asyncio
    async def test_sitemap_uses_robots_reference(self):
        robots = "User-agent: *\nAllow: /\nSitemap: https://example.com/custom-map.xml\n"
        sitemap = "<urlset><url><loc>https://example.com/</loc></url></urlset>"
        orchestrator, requested = make_orchestrator({
            "/": httpx.Response(200, html=PAGE),
            "/robots.txt": httpx.Response(200, text=robots),
            "/custom-map.xml": httpx.Response(200, text=sitemap),
        })
        response = await orchestrator.run("https://example.com")

        assert response.checks["robotsTxt"].score == 100
        assert response.checks["sitemap"].found is True
        assert response.checks["sitemap"].data["url"] == "https://example.com/custom-map.xml"
        assert "/sitemap.xml" not in requested


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
