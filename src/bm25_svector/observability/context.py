"""Context propagation for log and span correlation."""

from __future__ import annotations

from contextvars import ContextVar
from uuid import uuid4


# Per-thread / per-task correlation ids
trace_context: ContextVar[dict | None] = ContextVar("trace_context", default=None)


def generate_trace_id() -> str:
    """Generate a 32-char hex trace ID."""
    return uuid4().hex


def generate_span_id() -> str:
    """Generate a 16-char hex span ID."""
    return uuid4().hex[:16]


def get_trace_context() -> dict:
    """Get current trace context with trace_id and span_id."""
    ctx = trace_context.get()
    if ctx is None or not ctx.get("trace_id"):
        ctx = {"trace_id": generate_trace_id(), "span_id": generate_span_id()}
        trace_context.set(ctx)
    return ctx


def set_trace_context(trace_id: str, span_id: str, **extra: object) -> None:
    """Set trace context for the current execution context."""
    trace_context.set({"trace_id": trace_id, "span_id": span_id, **extra})


def update_span_id(span_id: str, trace_id: str | None = None) -> None:
    """Update span_id, keeping the current trace_id unless one is given."""
    ctx = trace_context.get() or {}
    updated = {**ctx, "span_id": span_id}
    if trace_id:
        updated["trace_id"] = trace_id
    trace_context.set(updated)
