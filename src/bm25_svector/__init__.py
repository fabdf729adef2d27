"""BM25 sparse-vector synthesis for lexical retrieval.

- tokenization: tokenizer backends and the caching registry
- terms: term statistics resolvers (in-memory, SQLite)
- bm25: document and query vector synthesis
- formatting: ``pgvecto.rs`` / ``pgvector`` text dialects
- service: the exposed operations
"""

from bm25_svector.errors import (
    MissingModelParameterError,
    ModelLoadError,
    SvectorError,
    TermSourceError,
    UnsupportedOutputDialectError,
    UnsupportedTokenizerKindError,
)
from bm25_svector.formatting import OutputDialect, format_sparse_vector
from bm25_svector.models import SparseVector, TermRecord
from bm25_svector.service import synthesize_document_sparse_vector, synthesize_query_sparse_vector, tokenize
from bm25_svector.terms import MappingTermStatistics, SqliteTermStatistics, TermStatisticsResolver
from bm25_svector.tokenization import TokenizerKind, TokenizerRegistry


__all__ = [
    "MappingTermStatistics",
    "MissingModelParameterError",
    "ModelLoadError",
    "OutputDialect",
    "SparseVector",
    "SqliteTermStatistics",
    "SvectorError",
    "TermRecord",
    "TermSourceError",
    "TermStatisticsResolver",
    "TokenizerKind",
    "TokenizerRegistry",
    "UnsupportedOutputDialectError",
    "UnsupportedTokenizerKindError",
    "format_sparse_vector",
    "synthesize_document_sparse_vector",
    "synthesize_query_sparse_vector",
    "tokenize",
]
