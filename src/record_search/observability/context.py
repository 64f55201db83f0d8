"""Per-request correlation ids shared by the JSON log formatter and tracing.

One search request carries a trace id, the id of the innermost span and the
request route. Outside a request, ids are minted lazily on first access.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import TYPE_CHECKING
from uuid import uuid4


if TYPE_CHECKING:
    from opentelemetry.trace import Span

_request_ids: ContextVar[dict | None] = ContextVar("record_search_request_ids", default=None)


def generate_trace_id() -> str:
    """Generate a 32-char hex trace ID."""
    return uuid4().hex


def generate_span_id() -> str:
    """Generate a 16-char hex span ID."""
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Return the ids of the current request, minting them if absent."""
    ids = _request_ids.get()
    if not ids or not ids.get("trace_id"):
        ids = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        _request_ids.set(ids)
    return ids


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    """Bind ids (and extras such as ``route``) to the current request."""
    _request_ids.set({**extra, "trace_id": trace_id, "span_id": span_id})


def update_span_id(span_id: str) -> None:
    ids = _request_ids.get() or {}
    _request_ids.set({**ids, "span_id": span_id})


def otel_span_ids(span: Span) -> tuple[str, str]:
    """Hex ``(trace_id, span_id)`` of an OpenTelemetry span."""
    span_context = span.get_span_context()
    return format(span_context.trace_id, "032x"), format(span_context.span_id, "016x")
