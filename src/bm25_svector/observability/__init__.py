"""Observability module for structured logging, metrics, and tracing."""

from bm25_svector.observability.context import get_trace_context, set_trace_context, trace_context
from bm25_svector.observability.logging import JsonFormatter, configure_logging
from bm25_svector.observability.metrics import (
    REQUEST_COUNT,
    REQUEST_LATENCY,
    TERM_LOOKUPS,
    TOKENIZER_BUILD_SECONDS,
    TOKENIZER_BUILDS,
    get_metrics,
    get_metrics_content_type,
    init_metrics,
    track_latency,
)
from bm25_svector.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "TERM_LOOKUPS",
    "TOKENIZER_BUILDS",
    "TOKENIZER_BUILD_SECONDS",
    "JsonFormatter",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_metrics_content_type",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "set_trace_context",
    "trace_context",
    "track_latency",
]
