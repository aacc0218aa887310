"""Tests for the in-memory request metrics."""

from storefront.infrastructure.web.metrics import RequestMetrics


class _Clock:

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestRequestMetrics:

    def test_empty_snapshot(self):
        snapshot = RequestMetrics().snapshot()
        assert snapshot["total_requests"] == 0
        assert snapshot["error_rate"] == 0.0
        assert snapshot["latency_ms"] == {"avg": 0.0, "p95": 0.0}
        assert snapshot["last_activity"] is None

    def test_counts_server_errors_only(self):
        metrics = RequestMetrics()
        metrics.record("/health", "GET", 200, 5.0)
        metrics.record("/api/payments/initialize", "POST", 400, 7.0)
        metrics.record("/api/hostbill/payment-modules", "GET", 502, 9.0)

        snapshot = metrics.snapshot()

        assert snapshot["total_requests"] == 3
        assert snapshot["errors"] == 1
        assert snapshot["error_rate"] == 1 / 3
        assert snapshot["latency_ms"]["avg"] == 7.0

    def test_uptime_and_last_activity(self):
        clock = _Clock()
        metrics = RequestMetrics(clock=clock)
        clock.now += 42
        metrics.record("/health", "GET", 200, 1.0)

        snapshot = metrics.snapshot()

        assert snapshot["uptime_seconds"] == 42
        assert snapshot["last_activity"] == 1042.0

    def test_hot_paths_and_recent(self):
        metrics = RequestMetrics(window=3)
        for _ in range(3):
            metrics.record("/health", "GET", 200, 1.0)
        metrics.record("/api/stats", "GET", 200, 1.0)

        snapshot = metrics.snapshot(recent=2)

        assert snapshot["hot_paths"][0] == {"method": "GET", "path": "/health", "hits": 3}
        assert snapshot["total_requests"] == 4
        assert [r["path"] for r in snapshot["recent_requests"]] == ["/health", "/api/stats"]
