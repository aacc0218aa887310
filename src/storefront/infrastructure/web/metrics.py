"""In-memory request metrics for the ``/api/stats`` endpoint.

One ``RequestMetrics`` instance is created per app and injected; there
are no module-level counters.
"""

from __future__ import annotations

import statistics
import threading
import time
from collections import Counter, deque
from dataclasses import dataclass
from typing import Any, Deque


@dataclass
class RequestSample:
    """Single HTTP request observation."""

    path: str
    method: str
    status: int
    duration_ms: float
    timestamp: float


class RequestMetrics:
    """Rolling request/latency tracking."""

    def __init__(self, window: int = 500, clock=time.time) -> None:
        self._samples: Deque[RequestSample] = deque(maxlen=window)
        self._lock = threading.Lock()
        self._clock = clock
        self._started_at = clock()
        self._counters: Counter = Counter()
        self._total_requests = 0
        self._error_count = 0
        self._last_activity: float | None = None

    def record(self, path: str, method: str, status: int, duration_ms: float) -> None:
        now = self._clock()
        sample = RequestSample(
            path=path,
            method=method,
            status=status,
            duration_ms=duration_ms,
            timestamp=now,
        )
        with self._lock:
            self._samples.append(sample)
            self._counters[(method, path)] += 1
            self._total_requests += 1
            self._last_activity = now
            if status >= 500:
                self._error_count += 1

    def snapshot(self, recent: int = 10) -> dict[str, Any]:
        with self._lock:
            samples = list(self._samples)
            total = self._total_requests
            errors = self._error_count
            last_activity = self._last_activity
            hot_paths = [
                {"method": method, "path": path, "hits": hits}
                for (method, path), hits in self._counters.most_common(5)
            ]

        durations = [s.duration_ms for s in samples]
        return {
            "uptime_seconds": int(self._clock() - self._started_at),
            "total_requests": total,
            "errors": errors,
            "error_rate": (errors / total) if total else 0.0,
            "last_activity": last_activity,
            "latency_ms": {
                "avg": statistics.mean(durations) if durations else 0.0,
                "p95": _quantile(durations, 0.95),
            },
            "hot_paths": hot_paths,
            "recent_requests": [
                {"method": s.method, "path": s.path, "status": s.status,
                 "duration_ms": round(s.duration_ms, 2), "timestamp": s.timestamp}
                for s in samples[-recent:]
            ],
        }


def _quantile(values: list[float], q: float) -> float:
    if not values:
        return 0.0
    if len(values) == 1:
        return values[0]
    return statistics.quantiles(values, n=100)[int(q * 100) - 1]
