"""Value objects shared by term lookup, synthesis and formatting."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

import numpy as np


_U32_MASK = 0xFFFFFFFF


@dataclass(frozen=True, slots=True)
class TermRecord:
    """Term statistics row supplied by an external indexing pipeline.

    ``term_id`` is narrowed to an unsigned 32-bit dimension index (stored
    signed ids wrap) and ``idf`` to single precision, matching the layout the
    downstream vector types expect.
    """

    term_id: int
    raw_token: str
    idf: float
    doc_frequency: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "term_id", int(self.term_id) & _U32_MASK)
        object.__setattr__(self, "idf", np.float32(self.idf))


@dataclass(frozen=True, slots=True)
class SparseVector:
    """Term id -> single-precision weight, iterated in ascending id order."""

    weights: Mapping[int, np.float32]

    @classmethod
    def from_mapping(cls, weights: Mapping[int, float]) -> SparseVector:
        ordered = {index: np.float32(weights[index]) for index in sorted(weights)}
        return cls(MappingProxyType(ordered))

    @classmethod
    def empty(cls) -> SparseVector:
        return cls(MappingProxyType({}))

    def items(self) -> Iterator[tuple[int, np.float32]]:
        for index in sorted(self.weights):
            yield index, self.weights[index]

    def is_empty(self) -> bool:
        return not self.weights

    def __len__(self) -> int:
        return len(self.weights)
