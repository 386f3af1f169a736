"""
Integration tests for the HTTP surface.

The orchestrator and rate limiter are swapped through FastAPI dependency
overrides; the target site is served by httpx.MockTransport.
"""

from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient

from config import Settings
from evaluators.orchestrator import CheckOrchestrator
from main import app, get_orchestrator, get_rate_limiter
from utils.rate_limiter import RateLimiter
from utils.safe_fetch import SafeFetcher

PAGE = "<html><body><h1>Hello</h1><h2>World</h2><p>Simple page.</p></body></html>"


def mock_orchestrator(routes):
    def handler(request):
        route = routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="Not Found")
        return route

    async def resolver(hostname):
        return "93.184.216.34"

    fetcher = SafeFetcher(resolver=resolver, transport=httpx.MockTransport(handler))
    return CheckOrchestrator(fetcher=fetcher, config=Settings())


@pytest.fixture
def limiter():
    return RateLimiter(limit=10, window_seconds=60)


@pytest.fixture
def client(limiter):
    orchestrator = mock_orchestrator({"/": httpx.Response(200, html=PAGE)})
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class TestHealthEndpoint:
    """Tests for health endpoint."""

    def test_health_returns_ok(self, client):
        """Health endpoint should return healthy status."""
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["limits"]["rate_limit_requests"] == 10


class TestLifespan:
    """The rate limiter lives on app.state for the application lifespan."""

    def test_rate_limiter_created_and_closed(self):
        with TestClient(app):
            rate_limiter = app.state.rate_limiter
            assert isinstance(rate_limiter, RateLimiter)
            assert rate_limiter.closed is False
        assert rate_limiter.closed is True


class TestCheckEndpointValidation:
    """Tests for input validation and SSRF rejection."""

    def test_missing_url_returns_400(self, client):
        response = client.post("/api/check", json={})
        assert response.status_code == 400
        assert response.json()["errorCode"] == "VALIDATION_ERROR"

    def test_blank_url_returns_400(self, client):
        response = client.post("/api/check", json={"url": "   "})
        assert response.status_code == 400

    def test_invalid_scheme_returns_400(self, client):
        response = client.post("/api/check", json={"url": "ftp://example.com"})
        assert response.status_code == 400
        assert response.json()["errorCode"] == "INVALID_URL"

    def test_localhost_url_rejected(self, client):
        """Localhost URLs should be rejected for SSRF prevention."""
        response = client.post("/api/check", json={"url": "http://localhost:8080"})
        assert response.status_code == 400
        assert "localhost" in response.json()["error"].lower()

    def test_encoded_loopback_rejected(self, client):
        for url in ("http://0177.0.0.1", "http://0x7f.0.0.1", "http://2130706433"):
            response = client.post("/api/check", json={"url": url})
            assert response.status_code == 400
            assert response.json()["errorCode"] == "URL_NOT_ALLOWED"

    def test_metadata_endpoint_rejected(self, client):
        response = client.post("/api/check", json={"url": "http://169.254.169.254/latest/meta-data"})
        assert response.status_code == 400


class TestPrimaryFetchFailure:
    """Primary fetch failures map to 400."""

    def test_unreachable_page_returns_400(self, limiter):
        orchestrator = mock_orchestrator({"/": httpx.Response(503, text="down")})
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        app.dependency_overrides[get_rate_limiter] = lambda: limiter
        try:
            with TestClient(app) as test_client:
                response = test_client.post("/api/check", json={"url": "https://example.com"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 400
        assert response.json()["errorCode"] == "HTTP_ERROR"
        assert "503" in response.json()["error"]


class TestRateLimiting:
    """Tests for admission control."""

    def test_eleventh_request_rejected(self, client):
        for _ in range(10):
            response = client.post("/api/check", json={"url": "https://example.com"})
            assert response.status_code == 200

        response = client.post("/api/check", json={"url": "https://example.com"})
        assert response.status_code == 429

        data = response.json()
        assert data["errorCode"] == "RATE_LIMITED"
        assert 1 <= data["retryAfter"] <= 60
        assert response.headers["Retry-After"] == str(data["retryAfter"])
        assert response.headers["X-RateLimit-Limit"] == "10"
        assert response.headers["X-RateLimit-Remaining"] == "0"

    def test_success_carries_rate_limit_headers(self, client):
        response = client.post("/api/check", json={"url": "https://example.com"})
        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "10"
        assert response.headers["X-RateLimit-Remaining"] == "9"

    def test_rejected_requests_are_counted(self, client, limiter):
        """Admission happens before URL validation."""
        for _ in range(10):
            client.post("/api/check", json={"url": "ftp://example.com"})
        response = client.post("/api/check", json={"url": "https://example.com"})
        assert response.status_code == 429


class TestCheckEndpoint:
    """End-to-end check against a mock site."""

    def test_plain_page_scores(self, client):
        response = client.post("/api/check", json={"url": "example.com"})
        assert response.status_code == 200

        data = response.json()
        assert data["url"] == "https://example.com"
        assert set(data["checks"]) == {
            "schema", "robotsTxt", "llmsTxt", "sitemap", "openGraph",
            "semanticHTML", "headingHierarchy", "faqBlocks", "pageSpeed", "authorAuthority",
        }
        assert data["checks"]["headingHierarchy"]["score"] == 100
        assert data["checks"]["schema"]["score"] == 0
        assert data["overallScore"] == 10
        assert data["grade"] == "poor"
        assert data["summary"] == {"passed": 2, "warning": 0, "failed": 8, "total": 10}
        assert {r["category"] for r in data["recommendations"]} >= {"Schema.org", "robots.txt"}

    def test_throwing_check_still_returns_all_checks(self, client):
        """A check that raises is scored 0; the request still succeeds."""
        with patch("evaluators.orchestrator.check_semantic_html", side_effect=RuntimeError("boom")):
            response = client.post("/api/check", json={"url": "https://example.com"})

        assert response.status_code == 200
        data = response.json()
        assert len(data["checks"]) == 10
        assert data["checks"]["semanticHTML"] == {
            "found": False,
            "score": 0,
            "details": "Check failed: semanticHTML",
            "data": {"error": "RuntimeError: boom"},
        }
        assert data["checks"]["headingHierarchy"]["score"] == 100


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
