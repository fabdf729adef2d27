"""BM25 sparse-vector synthesis for documents and queries.

All arithmetic runs in single precision (``numpy.float32``) so weights match
what the downstream ``svector``/``sparsevec`` types store. Non-finite results
that fall out of the formulas (``corpus_total_docs == 0``, an idf sum of zero)
are propagated as-is; callers own the validity of the corpus aggregates.

Two scoring quirks are kept on purpose:

- Document length counts only tokens that resolved to a term, so
  out-of-vocabulary tokens do not lengthen the document.
- Repeated query tokens overwrite rather than accumulate their idf, so
  duplicates in a query never raise its weight.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
import logging

import numpy as np

from bm25_svector.models import SparseVector, TermRecord
from bm25_svector.observability.metrics import TERM_LOOKUPS
from bm25_svector.terms import TermStatisticsResolver


logger = logging.getLogger(__name__)

_ZERO = np.float32(0.0)
_ONE = np.float32(1.0)


def resolve_tokens(tokens: Iterable[str], resolver: TermStatisticsResolver) -> list[TermRecord]:
    """Return the term records of the tokens that resolve, in token order.

    Tokens containing NUL are skipped without a lookup; the term store keys
    cannot represent them.
    """
    records: list[TermRecord] = []
    misses = 0
    for token in tokens:
        if "\x00" in token:
            misses += 1
            continue
        record = resolver.lookup(token)
        if record is None:
            misses += 1
            continue
        records.append(record)

    if records:
        TERM_LOOKUPS.labels(result="hit").inc(len(records))
    if misses:
        TERM_LOOKUPS.labels(result="miss").inc(misses)
    return records


def document_weight(tf: int, doc_length: float, avgdl: float, *, b: float, k1: float) -> np.float32:
    """Compute the BM25 term-frequency saturation weight (no idf factor)."""
    tf32 = np.float32(tf)
    b32 = np.float32(b)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return tf32 / (tf32 + np.float32(k1) * ((_ONE - b32) + b32 * (np.float32(doc_length) / np.float32(avgdl))))


def synthesize_document_vector(
    tokens: Iterable[str],
    resolver: TermStatisticsResolver,
    b: float,
    k1: float,
    corpus_total_words: int,
    corpus_total_docs: int,
) -> SparseVector:
    """Build the document-side sparse vector for ``tokens``."""
    term_frequency = Counter(record.term_id for record in resolve_tokens(tokens, resolver))
    if not term_frequency:
        return SparseVector.empty()

    with np.errstate(divide="ignore", invalid="ignore"):
        avgdl = np.float32(corpus_total_words) / np.float32(corpus_total_docs)
    doc_length = np.float32(sum(term_frequency.values()))

    weights = {
        term_id: document_weight(tf, doc_length, avgdl, b=b, k1=k1) for term_id, tf in term_frequency.items()
    }
    logger.debug(
        "Document vector: %d terms, length=%s, avgdl=%s",
        len(weights),
        doc_length,
        avgdl,
    )
    return SparseVector.from_mapping(weights)


def synthesize_query_vector(tokens: Iterable[str], resolver: TermStatisticsResolver) -> SparseVector:
    """Build the query-side sparse vector: idf L1-normalized over distinct terms."""
    idf_by_term: dict[int, np.float32] = {}
    for record in resolve_tokens(tokens, resolver):
        idf_by_term[record.term_id] = np.float32(record.idf)
    if not idf_by_term:
        return SparseVector.empty()

    ordered_ids = sorted(idf_by_term)
    total = _ZERO
    for term_id in ordered_ids:
        total = total + idf_by_term[term_id]

    with np.errstate(divide="ignore", invalid="ignore"):
        weights = {term_id: idf_by_term[term_id] / total for term_id in ordered_ids}
    logger.debug("Query vector: %d terms, idf sum=%s", len(weights), total)
    return SparseVector.from_mapping(weights)
