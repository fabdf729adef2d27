"""Tokenizer backends and the registry that caches them."""

from bm25_svector.tokenization.backends import (
    HuggingFaceTokenizer,
    JiebaTokenizer,
    TiktokenTokenizer,
    TinySegmenterTokenizer,
    TokenizerBackend,
    WhitespaceTokenizer,
    default_backend_factories,
)
from bm25_svector.tokenization.kinds import TokenizerKind
from bm25_svector.tokenization.registry import (
    KeyedCache,
    OnceSlot,
    TokenizerRegistry,
    get_default_registry,
    tokenize,
)


__all__ = [
    "HuggingFaceTokenizer",
    "JiebaTokenizer",
    "KeyedCache",
    "OnceSlot",
    "TiktokenTokenizer",
    "TinySegmenterTokenizer",
    "TokenizerBackend",
    "TokenizerKind",
    "TokenizerRegistry",
    "WhitespaceTokenizer",
    "default_backend_factories",
    "get_default_registry",
    "tokenize",
]
