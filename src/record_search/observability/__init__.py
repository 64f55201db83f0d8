"""Observability module for tracing, metrics, and structured logging."""

from record_search.observability.context import get_trace_context, set_trace_context
from record_search.observability.logging import JsonFormatter, configure_logging
from record_search.observability.metrics import (
    CORPUS_FETCH_ERRORS,
    CORPUS_SIZE,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    SEARCH_RESULTS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from record_search.observability.tracing import (
    TraceContextMiddleware,
    create_span,
    get_tracer,
    init_tracing,
    trace_request,
)


__all__ = [
    "CORPUS_FETCH_ERRORS",
    "CORPUS_SIZE",
    "SEARCH_LATENCY",
    "SEARCH_REQUESTS",
    "SEARCH_RESULTS",
    "JsonFormatter",
    "TraceContextMiddleware",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_tracing",
    "set_trace_context",
    "trace_request",
    "track_latency",
]
