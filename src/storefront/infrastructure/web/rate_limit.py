"""Per-client request limiter (in-process, not shared between workers)."""

from __future__ import annotations

import threading
import time


class RateLimiter:
    """Sliding window of request timestamps per client key.

    Clients idle for a whole window are dropped, so memory follows the
    number of recently active clients rather than every client ever seen.
    """

    def __init__(self, max_requests: int, window_seconds: float, clock=time.monotonic) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._buckets: dict[str, list[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        """Number of clients currently tracked."""
        with self._lock:
            return len(self._buckets)

    def allow(self, key: str) -> bool:
        """Record a hit for ``key``; False once the window is full."""
        if self.max_requests <= 0:
            return True
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(now)
            bucket = [ts for ts in self._buckets.get(key, ()) if now - ts < self.window_seconds]
            if len(bucket) >= self.max_requests:
                self._buckets[key] = bucket
                return False
            bucket.append(now)
            self._buckets[key] = bucket
            return True

    def retry_after(self, key: str) -> int:
        """Seconds until the oldest hit for ``key`` leaves the window."""
        with self._lock:
            bucket = self._buckets.get(key) or []
            if not bucket:
                return 0
            return max(0, int(self.window_seconds - (self._clock() - bucket[0])) + 1)

    def _sweep(self, now: float) -> None:
        # Buckets are appended in time order, so the last hit is the newest.
        stale = [k for k, hits in self._buckets.items() if not hits or now - hits[-1] >= self.window_seconds]
        for key in stale:
            del self._buckets[key]
        self._last_sweep = now
