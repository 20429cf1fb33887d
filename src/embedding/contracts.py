"""
Contracts for the upstream producers that turn documents into vectors.

Bag-of-words vectorizers yield sparse vectors over a fitted vocabulary;
embedders yield fixed-width dense vectors. Neither is implemented here.
"""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence, runtime_checkable

from .vectors import DenseVector, SparseVector


@runtime_checkable
class Vectorizer(Protocol):
    """Vocabulary-based vectorizer (count, TF-IDF, ...)."""

    def reset(self) -> None:
        ...

    def fit(self, documents: Iterable[str]) -> None:
        ...

    def transform(self, documents: Iterable[str]) -> Sequence[SparseVector]:
        ...

    def fit_then_transform(self, documents: Iterable[str]) -> Sequence[SparseVector]:
        ...


@runtime_checkable
class Embedder(Protocol):
    """Model-backed embedder; batches internally, output order matches input."""

    def transform(self, documents: Iterable[str]) -> Sequence[DenseVector]:
        ...
