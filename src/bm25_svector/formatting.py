"""Textual sparse vector dialects.

Both dialects render ``{index:weight, ...}/dims``; they differ only in index
origin. ``pgvecto.rs`` (``svector``) counts dimensions from 0, ``pgvector``
(``sparsevec``) from 1.
"""

from __future__ import annotations

from enum import Enum

import numpy as np

from bm25_svector.errors import UnsupportedOutputDialectError
from bm25_svector.models import SparseVector


class OutputDialect(Enum):
    """Index origin used when a vector is serialized."""

    ZERO_BASED = 0
    ONE_BASED = 1

    @property
    def offset(self) -> int:
        return self.value

    @classmethod
    def from_style(cls, style: str | OutputDialect) -> OutputDialect:
        """Map a style name (``pgvecto.rs`` or ``pgvector``) to its dialect."""
        if isinstance(style, OutputDialect):
            return style
        try:
            return _STYLES[style]
        except KeyError:
            raise UnsupportedOutputDialectError(style, sorted(_STYLES)) from None


_STYLES: dict[str, OutputDialect] = {
    "pgvecto.rs": OutputDialect.ZERO_BASED,
    "pgvector": OutputDialect.ONE_BASED,
}


def format_weight(value: float) -> str:
    """Render a weight as the shortest decimal that round-trips in single precision.

    Positional notation only; integral values drop the fraction (``1``) and
    non-finite values render as ``NaN``, ``inf`` and ``-inf``.
    """
    weight = np.float32(value)
    if np.isnan(weight):
        return "NaN"
    if np.isinf(weight):
        return "inf" if weight > 0 else "-inf"
    return np.format_float_positional(weight, unique=True, trim="-")


def format_sparse_vector(vector: SparseVector, dims: int, dialect: OutputDialect | str) -> str:
    """Serialize ``vector`` as ``{index:weight, ...}/dims`` in ascending index order."""
    resolved = OutputDialect.from_style(dialect)
    body = ", ".join(f"{index + resolved.offset}:{format_weight(weight)}" for index, weight in vector.items())
    return f"{{{body}}}/{dims}"
