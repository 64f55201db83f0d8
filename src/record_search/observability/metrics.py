"""Prometheus metrics for the search endpoint."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


SEARCH_REQUESTS = Counter(
    "record_search_requests_total",
    "Total search requests",
    ["mode", "status"],
)

SEARCH_LATENCY = Histogram(
    "record_search_latency_seconds",
    "Search latency in seconds, including the corpus fetch",
    ["stage"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

SEARCH_RESULTS = Histogram(
    "record_search_results",
    "Number of results returned per search",
    buckets=(0, 1, 2, 5, 10, 25, 50, 100),
)

CORPUS_SIZE = Gauge(
    "record_search_corpus_records",
    "Records in the most recently fetched corpus",
)

CORPUS_FETCH_ERRORS = Counter(
    "record_search_corpus_fetch_errors_total",
    "Corpus fetch failures",
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        target = histogram.labels(**labels) if labels else histogram
        target.observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get content type for metrics endpoint."""
    return CONTENT_TYPE_LATEST
