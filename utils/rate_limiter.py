"""
Rate limiter for inbound analysis requests.

Implements a per-client fixed-window counter with a hard cap on the number
of tracked clients and amortized cleanup of expired windows. The instance
is created once per application lifespan and handed to the request layer;
there is no module-level singleton.
"""

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional
import logging

from config import Settings, settings

logger = logging.getLogger(__name__)


@dataclass
class RateRecord:
    """Request count for one client within the current window."""
    count: int
    window_reset_at: float


@dataclass(frozen=True)
class RateLimitDecision:
    """
    Result of a rate limit check.

    Attributes:
        allowed: Whether the request may proceed
        remaining: Requests left in the current window
        retry_after: Seconds until the client may retry (denials only)
    """
    allowed: bool
    remaining: int
    retry_after: Optional[int] = None


class RateLimiter:
    """
    Per-client fixed-window rate limiter.

    Features:
    - A client gets `limit` requests per `window_seconds`
    - Table size never exceeds `max_entries`; unknown clients are denied
      while the table is full
    - Expired windows are swept lazily, at most once per `cleanup_interval`
    - Thread-safe using a single lock

    Client keys must come from a trusted source (the socket peer or a
    proxy-appended header), never from a header the client controls.

    Args:
        limit: Maximum requests per window
        window_seconds: Window length in seconds
        cleanup_interval: Minimum seconds between lazy sweeps
        max_entries: Hard cap on tracked clients
        clock: Monotonic time source in seconds (injectable for tests)
    """

    def __init__(
        self,
        limit: int = 10,
        window_seconds: float = 60.0,
        cleanup_interval: float = 300.0,
        max_entries: int = 100_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self.cleanup_interval = cleanup_interval
        self.max_entries = max_entries
        self._clock = clock

        self._records: Dict[str, RateRecord] = {}
        self._lock = threading.Lock()
        self._last_cleanup = clock()
        self._closed = False

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "RateLimiter":
        config = config or settings
        return cls(
            limit=config.rate_limit_requests,
            window_seconds=config.rate_limit_window_seconds,
            cleanup_interval=config.rate_limit_cleanup_interval_seconds,
            max_entries=config.rate_limit_max_entries,
        )

    def check(self, key: str) -> RateLimitDecision:
        """
        Count a request for `key` and decide whether it is allowed.

        Args:
            key: Client identifier

        Returns:
            RateLimitDecision

        Raises:
            RuntimeError: The limiter has been closed
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("Rate limiter is closed")
            now = self._clock()
            self._maybe_cleanup(now)

            record = self._records.get(key)

            if record is None or now > record.window_reset_at:
                # Full table: refuse new clients until a sweep frees space
                if record is None and len(self._records) >= self.max_entries:
                    logger.warning(f"Rate limiter table full ({self.max_entries} entries), denying new client")
                    return RateLimitDecision(
                        allowed=False,
                        remaining=0,
                        retry_after=math.ceil(self.window_seconds),
                    )
                self._records[key] = RateRecord(count=1, window_reset_at=now + self.window_seconds)
                return RateLimitDecision(allowed=True, remaining=self.limit - 1)

            record.count += 1

            if record.count > self.limit:
                retry_after = max(1, math.ceil(record.window_reset_at - now))
                logger.info(f"Rate limit exceeded for {key}, retry in {retry_after}s")
                return RateLimitDecision(allowed=False, remaining=0, retry_after=retry_after)

            return RateLimitDecision(allowed=True, remaining=max(0, self.limit - record.count))

    def get_info(self, key: str) -> RateRecord:
        """Current window for `key` without counting a request."""
        with self._lock:
            now = self._clock()
            record = self._records.get(key)
            if record is None or now > record.window_reset_at:
                return RateRecord(count=0, window_reset_at=now + self.window_seconds)
            return RateRecord(count=record.count, window_reset_at=record.window_reset_at)

    def _maybe_cleanup(self, now: float) -> None:
        """Sweep expired windows if the cleanup interval has elapsed. Caller holds the lock."""
        if now - self._last_cleanup < self.cleanup_interval:
            return
        self._sweep(now)

    def _sweep(self, now: float) -> int:
        expired = [key for key, record in self._records.items() if now > record.window_reset_at]
        for key in expired:
            del self._records[key]
        self._last_cleanup = now
        if expired:
            logger.debug(f"Rate limiter: evicted {len(expired)} expired windows")
        return len(expired)

    def cleanup(self) -> int:
        """
        Force a sweep of expired windows.

        Returns:
            Number of evicted records
        """
        with self._lock:
            return self._sweep(self._clock())

    @property
    def size(self) -> int:
        """Number of tracked clients."""
        with self._lock:
            return len(self._records)

    def reset(self, key: Optional[str] = None) -> None:
        """Reset rate limiter state."""
        with self._lock:
            if key:
                self._records.pop(key, None)
            else:
                self._records.clear()

    def close(self) -> None:
        """Release all state at application shutdown."""
        with self._lock:
            self._records.clear()
            self._closed = True
        logger.info("Rate limiter closed")

    @property
    def closed(self) -> bool:
        return self._closed
