"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from inverted_search.observability.context import current_log_context, index_context, log_context
from inverted_search.observability.logging import JsonFormatter, configure_logging, configure_logging_from_settings
from inverted_search.observability.metrics import (
    INDEX_DOC_COUNT,
    INDEX_OPERATIONS,
    INDEX_TERM_COUNT,
    QUERY_COUNT,
    QUERY_LATENCY,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    track_latency,
)
from inverted_search.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "INDEX_DOC_COUNT",
    "INDEX_OPERATIONS",
    "INDEX_TERM_COUNT",
    "QUERY_COUNT",
    "QUERY_LATENCY",
    "JsonFormatter",
    "configure_logging",
    "configure_logging_from_settings",
    "create_span",
    "current_log_context",
    "get_metrics",
    "get_metrics_content_type",
    "get_tracer",
    "index_context",
    "init_metrics",
    "init_tracing",
    "log_context",
    "track_latency",
]
