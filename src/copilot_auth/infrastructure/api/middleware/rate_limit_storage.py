"""In-memory storage for rate limiting counters.

This module provides a thread-safe in-memory store of fixed-window
counters. A window opens on the first hit for a key and lasts
``window_seconds``; every hit inside the window counts, allowed or not.
"""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock


@dataclass
class WindowCounter:
    """Counter for one key's current window."""

    count: int
    window_start: float
    window_seconds: float


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of one hit.

    Attributes:
        allowed: Whether the request is within the limit.
        limit: Maximum hits per window.
        remaining: Hits left in the current window.
        reset_after: Seconds until the current window closes.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_after: int


class RateLimitStorage:
    """Thread-safe in-memory storage for fixed-window rate limit counters."""

    def __init__(
        self,
        cleanup_interval: int = 3600,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize storage.

        Args:
            cleanup_interval: Interval in seconds to clean up closed windows.
            clock: Time source in seconds; injectable for tests.
        """
        self._storage: dict[str, WindowCounter] = {}
        self._lock = Lock()
        self._clock = clock
        self._last_cleanup = clock()
        self._cleanup_interval = cleanup_interval

    def hit(self, key: str, limit: int, window_seconds: int) -> RateLimitResult:
        """Count a request against the key's current window.

        Args:
            key: Composite key, e.g. ``login:203.0.113.7:alice@example.com``.
            limit: Maximum requests per window.
            window_seconds: Window length in seconds.

        Returns:
            RateLimitResult for this request.
        """
        now = self._clock()

        with self._lock:
            if now - self._last_cleanup > self._cleanup_interval:
                self._cleanup_stale(now)

            counter = self._storage.get(key)
            if counter is None or now >= counter.window_start + counter.window_seconds:
                counter = WindowCounter(count=0, window_start=now, window_seconds=window_seconds)
                self._storage[key] = counter

            counter.count += 1
            reset_after = max(0, math.ceil(counter.window_start + counter.window_seconds - now))
            return RateLimitResult(
                allowed=counter.count <= limit,
                limit=limit,
                remaining=max(0, limit - counter.count),
                reset_after=reset_after,
            )

    def reset(self) -> None:
        """Drop all counters."""
        with self._lock:
            self._storage.clear()

    def _cleanup_stale(self, now: float) -> None:
        """Remove counters whose window has closed."""
        to_delete = [
            k for k, v in self._storage.items()
            if now >= v.window_start + v.window_seconds
        ]
        for k in to_delete:
            del self._storage[k]
        self._last_cleanup = now
