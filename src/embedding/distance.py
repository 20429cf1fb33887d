"""
Distance metrics over dense and sparse embedding vectors.

Every metric offers a raw-space `distance` and a `unit_sphere_distance`
computed after L2-normalising both operands. The clustering engine only
uses the unit-sphere form, so thresholds stay comparable across metrics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from .vectors import DenseVector, EmbeddingVector, SparseVector

__all__ = [
    "EPSILON",
    "DistanceMetric",
    "ManhattanDistance",
    "EuclideanDistance",
    "CosineDistance",
    "METRICS",
    "get_metric",
]

# Floor for |v1|*|v2| in cosine distance
EPSILON = 1e-10


class DistanceMetric(ABC):
    """Strategy object: dispatches on vector type to dense/sparse kernels."""

    name = "metric"

    @abstractmethod
    def _dense(self, a: np.ndarray, b: np.ndarray) -> float:
        ...

    @abstractmethod
    def _sparse(self, v1: SparseVector, v2: SparseVector) -> float:
        ...

    def distance(self, v1: EmbeddingVector, v2: EmbeddingVector) -> float:
        if isinstance(v1, DenseVector) and isinstance(v2, DenseVector):
            v1.check_shape(v2)
            return self._dense(v1.data, v2.data)
        if isinstance(v1, SparseVector) and isinstance(v2, SparseVector):
            return self._sparse(v1, v2)
        raise TypeError(
            f"Cannot compare {type(v1).__name__} with {type(v2).__name__}"
        )

    def unit_sphere_distance(self, v1: EmbeddingVector, v2: EmbeddingVector) -> float:
        if isinstance(v1, SparseVector) and isinstance(v2, SparseVector):
            v1, v2 = SparseVector.align(v1, v2)
        elif isinstance(v1, DenseVector) and isinstance(v2, DenseVector):
            v1.check_shape(v2)
        else:
            raise TypeError(
                f"Cannot compare {type(v1).__name__} with {type(v2).__name__}"
            )
        return self._dense(v1.to_unit_vector().data, v2.to_unit_vector().data)

    def __call__(self, v1: EmbeddingVector, v2: EmbeddingVector) -> float:
        return self.unit_sphere_distance(v1, v2)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class _IntersectionMetric(DistanceMetric):
    """
    Sparse inputs only compare dimensions both vectors store.

    A dimension present on one side only contributes nothing, which differs
    from a true norm against zero. Pass missing_as_zero=True for the union.
    """

    def __init__(self, missing_as_zero: bool = False):
        self.missing_as_zero = missing_as_zero

    def _sparse(self, v1: SparseVector, v2: SparseVector) -> float:
        if self.missing_as_zero:
            a, b = SparseVector.align(v1, v2)
            return self._dense(a.data, b.data)
        shared = [k for k in v1.keys() if k in v2]
        a = np.array([v1[k] for k in shared], dtype=np.float64)
        b = np.array([v2[k] for k in shared], dtype=np.float64)
        return self._dense(a, b)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(missing_as_zero={self.missing_as_zero})"


class ManhattanDistance(_IntersectionMetric):
    name = "manhattan"

    def _dense(self, a: np.ndarray, b: np.ndarray) -> float:
        return float(np.sum(np.abs(a - b)))


class EuclideanDistance(_IntersectionMetric):
    name = "euclidean"

    def _dense(self, a: np.ndarray, b: np.ndarray) -> float:
        return float(np.sqrt(np.sum((a - b) ** 2)))


class CosineDistance(DistanceMetric):
    """1 - cosine similarity. Ranges over [0, 2]."""

    name = "cosine"

    def _dense(self, a: np.ndarray, b: np.ndarray) -> float:
        dot = float(np.dot(a, b))
        magnitude = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
        return 1.0 - dot / max(magnitude, EPSILON)

    def _sparse(self, v1: SparseVector, v2: SparseVector) -> float:
        dot = sum(value * v2[k] for k, value in v1.items() if k in v2)
        magnitude1 = float(np.sqrt(sum(v * v for v in v1.data.values())))
        magnitude2 = float(np.sqrt(sum(v * v for v in v2.data.values())))
        return 1.0 - dot / max(magnitude1 * magnitude2, EPSILON)

    def similarity(self, v1: EmbeddingVector, v2: EmbeddingVector) -> float:
        return 1.0 - self.distance(v1, v2)


METRICS: dict[str, type[DistanceMetric]] = {
    ManhattanDistance.name: ManhattanDistance,
    EuclideanDistance.name: EuclideanDistance,
    CosineDistance.name: CosineDistance,
}


def get_metric(name: str, missing_as_zero: bool = False) -> DistanceMetric:
    """Look up a metric by name ("manhattan", "euclidean", "cosine")."""
    try:
        metric_cls = METRICS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown metric '{name}'. Choose from: {', '.join(sorted(METRICS))}"
        )
    if issubclass(metric_cls, _IntersectionMetric):
        return metric_cls(missing_as_zero=missing_as_zero)
    return metric_cls()
