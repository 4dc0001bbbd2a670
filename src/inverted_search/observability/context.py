"""Fields attached to every log record emitted while an index operation runs.

The index name is bound per call with ``index_context``. Trace and span ids
are read from the active OpenTelemetry span, so log lines emitted inside an
``inverted_search.*`` span share its ids.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from opentelemetry import trace


_log_fields: ContextVar[dict[str, str] | None] = ContextVar("inverted_search_log_fields", default=None)


def current_log_context() -> dict[str, str]:
    """Return the bound fields plus ``trace_id``/``span_id`` of the current span."""
    fields = dict(_log_fields.get() or {})
    span_context = trace.get_current_span().get_span_context()
    if span_context.is_valid:
        fields["trace_id"] = format(span_context.trace_id, "032x")
        fields["span_id"] = format(span_context.span_id, "016x")
    return fields


@contextmanager
def log_context(**fields: str) -> Iterator[None]:
    """Bind ``fields`` for the duration of the block; nesting adds to outer fields."""
    token = _log_fields.set({**(_log_fields.get() or {}), **fields})
    try:
        yield
    finally:
        _log_fields.reset(token)


def index_context(index_name: str):
    """Bind the name of the index being operated on."""
    return log_context(index=index_name)
