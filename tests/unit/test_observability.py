"""Unit tests for logging, tracing and metrics helpers."""

import io
import logging
import sys

import orjson
from prometheus_client import REGISTRY
import pytest

from bm25_svector.observability.context import get_trace_context, set_trace_context, trace_context
from bm25_svector.observability.logging import JsonFormatter, configure_logging
from bm25_svector.observability.metrics import (
    REQUEST_LATENCY,
    TOKENIZER_BUILDS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)
from bm25_svector.observability.tracing import create_span, get_tracer, init_tracing


def _record(msg="hello", *, name="bm25_svector.terms", extra=None, exc_info=None):
    record = logging.LogRecord(name, logging.INFO, __file__, 1, msg, (), exc_info)
    for key, value in (extra or {}).items():
        setattr(record, key, value)
    return record


@pytest.fixture
def fresh_trace_context():
    token = trace_context.set(None)
    yield
    trace_context.reset(token)


@pytest.mark.unit
class TestJsonFormatter:
    def test_core_fields_and_trace_ids(self, fresh_trace_context):
        set_trace_context("a" * 32, "b" * 16)

        entry = orjson.loads(JsonFormatter().format(_record()))

        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "bm25_svector.terms"
        assert entry["component"] == "terms"
        assert entry["trace_id"] == "a" * 32
        assert entry["span_id"] == "b" * 16

    def test_extras_are_included_and_secrets_redacted(self):
        record = _record(extra={"kind": "hf", "hf_token": "hf_secret", "model": "bert-base-uncased"})

        entry = orjson.loads(JsonFormatter().format(record))

        assert entry["kind"] == "hf"
        assert entry["model"] == "bert-base-uncased"
        assert entry["hf_token"] == "[REDACTED]"

    def test_long_messages_are_truncated(self):
        entry = orjson.loads(JsonFormatter().format(_record("x" * 5000)))

        assert len(entry["message"]) == JsonFormatter.MAX_MESSAGE_LEN + 3

    def test_exception_is_rendered(self):
        try:
            raise RuntimeError("tokenizer crashed")
        except RuntimeError:
            record = _record(exc_info=sys.exc_info())

        entry = orjson.loads(JsonFormatter().format(record))

        assert "RuntimeError: tokenizer crashed" in entry["exception"]


@pytest.mark.unit
class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers = root.handlers[:]
        level = root.level
        yield
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)

    def test_installs_single_json_handler(self):
        configure_logging("debug", json_output=True)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("huggingface_hub").level == logging.WARNING

    def test_plain_text_and_logger_overrides(self):
        configure_logging("warning", json_output=False, logger_levels={"bm25_svector.terms": "debug"})

        assert not isinstance(logging.getLogger().handlers[0].formatter, JsonFormatter)
        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("bm25_svector.terms").level == logging.DEBUG
        logging.getLogger("bm25_svector.terms").setLevel(logging.NOTSET)

    def test_stream_selects_handler_destination(self):
        buffer = io.StringIO()

        configure_logging("info", json_output=True, stream=buffer)
        logging.getLogger("bm25_svector.cli").info("to the side channel")

        assert orjson.loads(buffer.getvalue())["message"] == "to the side channel"


@pytest.mark.unit
class TestTracing:
    def test_span_updates_log_correlation_ids(self, fresh_trace_context):
        init_tracing()

        with create_span("svector.test", attributes={"svector.dims": 8, "svector.model": None}) as span:
            ctx = span.get_span_context()
            current = get_trace_context()

        if ctx.is_valid:
            assert current["span_id"] == format(ctx.span_id, "016x")
            assert current["trace_id"] == format(ctx.trace_id, "032x")

    def test_tracer_is_shared_and_used_by_spans(self):
        tracer = get_tracer()

        assert get_tracer() is tracer
        with tracer.start_as_current_span("svector.direct") as span:
            assert span is not None

    def test_errors_propagate(self):
        with pytest.raises(KeyError):
            with create_span("svector.failing"):
                raise KeyError("boom")


@pytest.mark.unit
class TestMetrics:
    def test_counter_bridge_updates_prometheus(self):
        labels = {"kind": "whitespace", "status": "ok"}
        before = REGISTRY.get_sample_value("svector_tokenizer_builds_total", labels) or 0.0

        TOKENIZER_BUILDS.labels(**labels).inc()

        assert REGISTRY.get_sample_value("svector_tokenizer_builds_total", labels) == before + 1

    def test_track_latency_observes_even_on_error(self):
        labels = {"operation": "observability-test"}
        before = REGISTRY.get_sample_value("svector_request_latency_seconds_count", labels) or 0.0

        with pytest.raises(ValueError):
            with track_latency(REQUEST_LATENCY, **labels):
                raise ValueError("rejected")

        assert REGISTRY.get_sample_value("svector_request_latency_seconds_count", labels) == before + 1

    def test_exposition(self):
        assert b"svector_requests_total" in get_metrics()
        assert get_metrics_content_type().startswith("text/plain")
