"""
Prometheus metrics for the ticker-search service.

Defines and exposes metrics for:
- Suggestion searches by kind (text, advanced) and outcome
- Per-phase catalog latency (exact, partial, filtered)
- Result set sizes
- Catalog refresh runs

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# Typeahead latency is expected well under a second
LATENCY_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5)


class MetricsCollector:
    """
    Prometheus metrics collector for suggestion search and catalog refresh.

    Usage:
        metrics = get_metrics()
        metrics.start_server()

        metrics.record_search("text", "success", result_count=7, latency=0.012)
        metrics.record_phase_latency("exact", 0.004)
    """

    def __init__(self):
        self.searches = Counter(
            "ticker_search_searches_total",
            "Total suggestion searches",
            ["kind", "outcome"],  # kind: text, advanced; outcome: success, validation_error, retrieval_error
        )

        self.search_latency = Histogram(
            "ticker_search_search_latency_seconds",
            "End-to-end suggestion search latency",
            ["kind"],
            buckets=LATENCY_BUCKETS,
        )

        self.phase_latency = Histogram(
            "ticker_search_phase_latency_seconds",
            "Catalog round-trip latency per retrieval phase",
            ["phase"],  # exact, partial, filtered
            buckets=LATENCY_BUCKETS,
        )

        self.result_count = Histogram(
            "ticker_search_result_count",
            "Number of suggestions returned per search",
            ["kind"],
            buckets=(0, 1, 5, 10, 20, 50, 100),
        )

        self.catalog_refreshes = Counter(
            "ticker_search_catalog_refreshes_total",
            "Catalog refresh runs",
            ["status"],  # success, empty, error
        )

        self.catalog_size = Gauge(
            "ticker_search_catalog_size",
            "Securities stored by the last successful catalog refresh",
        )

        logger.info("Prometheus metrics initialized")

    def start_server(self, port: int | None = None) -> None:
        """Start Prometheus metrics HTTP server (port defaults to settings)."""
        settings = get_settings()
        port = port or settings.metrics_port

        start_http_server(port, registry=REGISTRY)
        logger.info(f"Prometheus metrics server started on port {port}")

    def record_search(
        self,
        kind: str,
        outcome: str,
        result_count: int = 0,
        latency: float | None = None,
    ) -> None:
        """
        Record a completed suggestion search.

        Args:
            kind: "text" or "advanced"
            outcome: success, validation_error or retrieval_error
            result_count: Suggestions returned (successful searches only)
            latency: Optional end-to-end latency in seconds
        """
        self.searches.labels(kind=kind, outcome=outcome).inc()
        if outcome == "success":
            self.result_count.labels(kind=kind).observe(result_count)
        if latency is not None:
            self.search_latency.labels(kind=kind).observe(latency)

    def record_phase_latency(self, phase: str, latency: float) -> None:
        """Record one catalog round-trip (exact, partial or filtered)."""
        self.phase_latency.labels(phase=phase).observe(latency)

    def record_catalog_refresh(self, status: str, stored: int = 0) -> None:
        """Record a catalog refresh run and, on success, the new catalog size."""
        self.catalog_refreshes.labels(status=status).inc()
        if status == "success":
            self.catalog_size.set(stored)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
