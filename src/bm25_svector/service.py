"""Exposed operations: tokenize text and synthesize BM25 sparse vectors.

These are the entry points host integrations call. Each call is synchronous,
safe to issue from many threads at once, and either returns a complete result
or raises an ``SvectorError`` without partial output.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
import logging
from typing import Any

from bm25_svector.bm25 import synthesize_document_vector, synthesize_query_vector
from bm25_svector.errors import SvectorError
from bm25_svector.formatting import OutputDialect, format_sparse_vector
from bm25_svector.observability.metrics import REQUEST_COUNT, REQUEST_LATENCY, track_latency
from bm25_svector.observability.tracing import create_span
from bm25_svector.terms import TermSourceHandle, open_term_source
from bm25_svector.tokenization.kinds import TokenizerKind
from bm25_svector.tokenization.registry import TokenizerRegistry, get_default_registry


logger = logging.getLogger(__name__)


def _label(value: object) -> str:
    if isinstance(value, Enum):
        return value.name.lower()
    return str(value)


@contextmanager
def _operation(name: str, **attributes: Any) -> Iterator[None]:
    span_attributes = {f"svector.{key}": value for key, value in attributes.items()}
    with create_span(f"svector.{name}", attributes=span_attributes), track_latency(REQUEST_LATENCY, operation=name):
        try:
            yield
        except SvectorError as exc:
            REQUEST_COUNT.labels(operation=name, status="rejected").inc()
            logger.warning("%s rejected: %s", name, exc)
            raise
        except Exception:
            REQUEST_COUNT.labels(operation=name, status="error").inc()
            logger.exception("%s failed", name)
            raise
    REQUEST_COUNT.labels(operation=name, status="ok").inc()


def tokenize(
    text: str,
    kind: str | TokenizerKind,
    model: str | None = None,
    *,
    registry: TokenizerRegistry | None = None,
) -> list[str]:
    """Tokenize ``text`` with the ``kind``/``model`` backend."""
    active = registry or get_default_registry()
    with _operation("tokenize", tokenizer=_label(kind), model=model):
        return active.tokenize(kind, model, text)


def synthesize_document_sparse_vector(
    term_source_handle: TermSourceHandle,
    b: float,
    k1: float,
    corpus_total_words: int,
    corpus_total_docs: int,
    dims: int,
    text: str,
    dialect: str | OutputDialect,
    kind: str | TokenizerKind,
    model: str | None = None,
    *,
    registry: TokenizerRegistry | None = None,
) -> str:
    """Render the BM25 document vector of ``text`` in the requested dialect.

    Args:
        term_source_handle: Resolver object or path to a term statistics database.
        b: Length normalization (0 disables it).
        k1: Term frequency saturation.
        corpus_total_words: Sum of document lengths over the corpus.
        corpus_total_docs: Number of documents in the corpus.
        dims: Declared dimensionality written after the ``/``.
        text: Document text.
        dialect: ``pgvecto.rs`` or ``pgvector``.
        kind: Tokenizer kind.
        model: Model or encoding for ``hf`` and ``tiktoken``.
    """
    active = registry or get_default_registry()
    with _operation("document", tokenizer=_label(kind), model=model, style=_label(dialect), dims=dims):
        tokens = active.tokenize(kind, model, text)
        resolved = OutputDialect.from_style(dialect)
        with open_term_source(term_source_handle) as resolver:
            vector = synthesize_document_vector(tokens, resolver, b, k1, corpus_total_words, corpus_total_docs)
        return format_sparse_vector(vector, dims, resolved)


def synthesize_query_sparse_vector(
    term_source_handle: TermSourceHandle,
    dims: int,
    text: str,
    dialect: str | OutputDialect,
    kind: str | TokenizerKind,
    model: str | None = None,
    *,
    registry: TokenizerRegistry | None = None,
) -> str:
    """Render the idf-normalized query vector of ``text`` in the requested dialect."""
    active = registry or get_default_registry()
    with _operation("query", tokenizer=_label(kind), model=model, style=_label(dialect), dims=dims):
        tokens = active.tokenize(kind, model, text)
        resolved = OutputDialect.from_style(dialect)
        with open_term_source(term_source_handle) as resolver:
            vector = synthesize_query_vector(tokens, resolver)
        return format_sparse_vector(vector, dims, resolved)
