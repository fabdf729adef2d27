"""Closed set of tokenizer backends understood by the registry."""

from __future__ import annotations

from enum import Enum

from bm25_svector.errors import UnsupportedTokenizerKindError


class TokenizerKind(str, Enum):
    """Tokenizer backends, keyed by the name callers pass in."""

    WHITESPACE = "whitespace"
    HUGGINGFACE = "hf"
    JIEBA = "jieba"
    TINYSEGMENTER = "tinysegmenter"
    TIKTOKEN = "tiktoken"

    @property
    def requires_model(self) -> bool:
        """Whether instances are parameterized by an open-ended model string."""
        return self in _MODEL_PARAMETERIZED

    @classmethod
    def parse(cls, name: str | TokenizerKind) -> TokenizerKind:
        """Resolve a caller-supplied name exactly, raising for unknown kinds."""
        if isinstance(name, TokenizerKind):
            return name
        try:
            return cls(name)
        except ValueError:
            raise UnsupportedTokenizerKindError(name, sorted(k.value for k in cls)) from None


_MODEL_PARAMETERIZED = frozenset({TokenizerKind.HUGGINGFACE, TokenizerKind.TIKTOKEN})
