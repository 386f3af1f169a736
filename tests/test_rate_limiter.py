"""
Unit tests for the fixed-window rate limiter.

A fake clock makes window expiry deterministic.
"""

import threading

import pytest

from utils.rate_limiter import RateLimiter


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class TestFixedWindow:
    """Tests for per-client counting."""

    def test_first_ten_allowed_eleventh_denied(self, clock):
        limiter = RateLimiter(limit=10, window_seconds=60, clock=clock)

        for i in range(10):
            decision = limiter.check("203.0.113.5")
            assert decision.allowed is True
            assert decision.remaining == 9 - i

        denied = limiter.check("203.0.113.5")
        assert denied.allowed is False
        assert denied.remaining == 0
        assert denied.retry_after == 60

    def test_retry_after_counts_down(self, clock):
        limiter = RateLimiter(limit=1, window_seconds=60, clock=clock)
        limiter.check("a")
        clock.advance(45.5)
        assert limiter.check("a").retry_after == 15

    def test_retry_after_at_least_one_second(self, clock):
        limiter = RateLimiter(limit=1, window_seconds=60, clock=clock)
        limiter.check("a")
        clock.advance(59.99)
        assert limiter.check("a").retry_after == 1

    def test_allowed_again_after_window(self, clock):
        limiter = RateLimiter(limit=10, window_seconds=60, clock=clock)
        for _ in range(11):
            limiter.check("a")

        clock.advance(61)
        decision = limiter.check("a")
        assert decision.allowed is True
        assert decision.remaining == 9

    def test_clients_counted_separately(self, clock):
        limiter = RateLimiter(limit=1, window_seconds=60, clock=clock)
        assert limiter.check("a").allowed is True
        assert limiter.check("a").allowed is False
        assert limiter.check("b").allowed is True

    def test_get_info_does_not_count(self, clock):
        limiter = RateLimiter(limit=2, window_seconds=60, clock=clock)
        limiter.check("a")
        assert limiter.get_info("a").count == 1
        assert limiter.get_info("a").count == 1
        assert limiter.get_info("unknown").count == 0


class TestHardCap:
    """Tests for the bounded client table."""

    def test_new_client_denied_when_full(self, clock):
        limiter = RateLimiter(limit=5, window_seconds=60, max_entries=3, clock=clock)
        for key in ("a", "b", "c"):
            assert limiter.check(key).allowed is True

        denied = limiter.check("d")
        assert denied.allowed is False
        assert denied.retry_after == 60
        assert limiter.size == 3

    def test_known_client_still_served_when_full(self, clock):
        limiter = RateLimiter(limit=5, window_seconds=60, max_entries=2, clock=clock)
        limiter.check("a")
        limiter.check("b")
        assert limiter.check("a").allowed is True

    def test_sweep_frees_slots(self, clock):
        limiter = RateLimiter(limit=5, window_seconds=60, max_entries=2, clock=clock)
        limiter.check("a")
        clock.advance(30)
        limiter.check("b")
        clock.advance(31)  # "a" expired, "b" still live

        assert limiter.check("c").allowed is False
        assert limiter.cleanup() == 1
        assert limiter.check("c").allowed is True
        assert limiter.size == 2


class TestCleanup:
    """Tests for lazy cleanup."""

    def test_lazy_sweep_waits_for_interval(self, clock):
        limiter = RateLimiter(limit=5, window_seconds=60, cleanup_interval=300, clock=clock)
        limiter.check("a")
        clock.advance(120)
        limiter.check("b")
        assert limiter.size == 2  # "a" expired but interval not yet elapsed

        clock.advance(200)
        limiter.check("c")
        assert limiter.size == 1  # sweep removed "a" and "b"

    def test_reset_and_close(self, clock):
        limiter = RateLimiter(clock=clock)
        limiter.check("a")
        limiter.check("b")

        limiter.reset("a")
        assert limiter.size == 1

        limiter.close()
        assert limiter.size == 0
        assert limiter.closed is True

    def test_closed_limiter_refuses_checks(self, clock):
        limiter = RateLimiter(clock=clock)
        limiter.close()
        with pytest.raises(RuntimeError):
            limiter.check("a")


class TestThreadSafety:
    """Concurrent checks never over-admit."""

    def test_concurrent_checks_respect_limit(self, clock):
        limiter = RateLimiter(limit=50, window_seconds=60, clock=clock)
        results = []
        lock = threading.Lock()

        def worker():
            for _ in range(20):
                decision = limiter.check("shared")
                with lock:
                    results.append(decision.allowed)

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(True) == 50
        assert results.count(False) == 150


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
