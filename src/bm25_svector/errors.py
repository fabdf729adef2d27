"""Error taxonomy surfaced by the sparse-vector engine.

Every failure is raised synchronously to the caller; no partial vector is
ever returned. Tokens that do not resolve against the term statistics are
not errors and never reach this module.
"""

from __future__ import annotations


class SvectorError(ValueError):
    """Base error for tokenization, term lookup and vector rendering."""


class UnsupportedTokenizerKindError(SvectorError):
    """Raised when a tokenizer kind name is not one of the known backends."""

    def __init__(self, kind: str, available: list[str]) -> None:
        self.kind = kind
        self.available = available
        super().__init__(f"Unknown tokenizer '{kind}'. Available: {available}")


class MissingModelParameterError(SvectorError):
    """Raised when a model-parameterized tokenizer is called without a model."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Tokenizer '{kind}' requires a model parameter")


class ModelLoadError(SvectorError):
    """Raised when a tokenizer model or encoding cannot be resolved or loaded."""

    def __init__(self, kind: str, model: str, reason: str) -> None:
        self.kind = kind
        self.model = model
        super().__init__(f"Failed to load {kind} tokenizer for '{model}': {reason}")


class UnsupportedOutputDialectError(SvectorError):
    """Raised when the requested sparse vector style is unknown."""

    def __init__(self, style: str, available: list[str]) -> None:
        self.style = style
        self.available = available
        super().__init__(f"Unknown svector style '{style}'. Available: {available}")


class TermSourceError(SvectorError):
    """Raised when a term statistics source cannot be opened or queried."""
