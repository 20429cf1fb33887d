"""
Embedding vector types.

Dense vectors wrap a fixed-length numpy array; sparse vectors map integer
dimensions to values, with every absent dimension implicitly zero.
Vectors are immutable values: centroid updates always produce a new vector.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Hashable, Iterable, Mapping, Optional, Union

import numpy as np


class ShapeMismatchError(ValueError):
    """Raised when dense vectors of different lengths are combined."""
    pass


class EmbeddingVector(ABC):
    """Capabilities the clustering engine needs from a vector."""

    @property
    @abstractmethod
    def length(self) -> int:
        ...

    @abstractmethod
    def __getitem__(self, index: int) -> float:
        ...

    @abstractmethod
    def centroid_blend(self, other, weight: float = 1.0):
        """
        Drift this vector toward `other`.

        Each dimension becomes ``self + weight / 2 * (other - self)``, so
        weight=1 lands halfway and weight=0 leaves the values unchanged.
        """
        ...

    @abstractmethod
    def content_key(self) -> Hashable:
        """Key derived from the values; equal vectors give equal keys."""
        ...

    def __len__(self) -> int:
        return self.length

    def __hash__(self) -> int:
        return hash(self.content_key())

    def distance_to(self, other, calculate_distance: Callable[[EmbeddingVector, EmbeddingVector], float]) -> float:
        """Apply a distance function to (self, other)."""
        return calculate_distance(self, other)


class DenseVector(EmbeddingVector):
    """Fixed-length vector backed by a float64 array."""

    __slots__ = ("_data",)

    def __init__(self, data: Union[Iterable[float], np.ndarray]):
        array = np.array(data, dtype=np.float64)
        if array.ndim != 1:
            raise ShapeMismatchError(f"Dense vector must be 1-D, got shape {array.shape}")
        array.setflags(write=False)
        self._data = array

    @property
    def data(self) -> np.ndarray:
        """Read-only view of the values."""
        return self._data

    @property
    def length(self) -> int:
        return self._data.shape[0]

    def __getitem__(self, index: int) -> float:
        if not 0 <= index < self.length:
            raise IndexError(f"index {index} out of range for vector of length {self.length}")
        return float(self._data[index])

    def __iter__(self):
        return iter(self._data.tolist())

    def __eq__(self, other) -> bool:
        if not isinstance(other, DenseVector):
            return NotImplemented
        return self.length == other.length and bool(np.array_equal(self._data, other._data))

    __hash__ = EmbeddingVector.__hash__

    def __repr__(self) -> str:
        return f"DenseVector({self._data.tolist()})"

    def check_shape(self, other: DenseVector) -> None:
        """Raise ShapeMismatchError unless `other` has the same length."""
        if not isinstance(other, DenseVector):
            raise TypeError(f"Expected DenseVector, got {type(other).__name__}")
        if other.length != self.length:
            raise ShapeMismatchError(
                f"Vector lengths differ: {self.length} != {other.length}"
            )

    def centroid_blend(self, other: DenseVector, weight: float = 1.0) -> DenseVector:
        self.check_shape(other)
        return DenseVector(self._data + (weight * 0.5) * (other._data - self._data))

    def content_key(self) -> Hashable:
        # tuple hashing treats 0.0 and -0.0 alike, matching value equality
        return tuple(self._data.tolist())

    def norm(self) -> float:
        return float(np.linalg.norm(self._data))

    def to_unit_vector(self) -> DenseVector:
        """Same direction, magnitude 1. A zero vector is returned unchanged."""
        norm = self.norm()
        if norm == 0.0:
            return self
        return DenseVector(self._data / norm)


class SparseVector(EmbeddingVector):
    """Vector stored as {dimension: value}; missing dimensions are zero."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[int, float]):
        self._data: dict[int, float] = {int(k): float(v) for k, v in data.items()}

    @property
    def data(self) -> Mapping[int, float]:
        """Copy of the stored entries, in insertion order."""
        return dict(self._data)

    @property
    def length(self) -> int:
        """Number of stored entries."""
        return len(self._data)

    def __getitem__(self, index: int) -> float:
        # KeyError signals absence; use get() for the implicit zero
        return self._data[index]

    def __contains__(self, key: int) -> bool:
        return key in self._data

    def get(self, key: int, default: float = 0.0) -> float:
        return self._data.get(key, default)

    def keys(self) -> list[int]:
        return list(self._data)

    def items(self):
        return self._data.items()

    def __eq__(self, other) -> bool:
        if not isinstance(other, SparseVector):
            return NotImplemented
        return self._data == other._data

    __hash__ = EmbeddingVector.__hash__

    def __repr__(self) -> str:
        return f"SparseVector({self._data})"

    def union_keys(self, other: SparseVector) -> list[int]:
        """Own keys in order, followed by keys only `other` has."""
        keys = list(self._data)
        keys.extend(k for k in other._data if k not in self._data)
        return keys

    def centroid_blend(self, other: SparseVector, weight: float = 1.0) -> SparseVector:
        if not isinstance(other, SparseVector):
            raise TypeError(f"Expected SparseVector, got {type(other).__name__}")
        centroid = {}
        for key in self.union_keys(other):
            this_value = self._data.get(key, 0.0)
            other_value = other._data.get(key, 0.0)
            centroid[key] = this_value + weight * 0.5 * (other_value - this_value)
        return SparseVector(centroid)

    def content_key(self) -> Hashable:
        return frozenset(self._data.items())

    def to_dense(self, keys: Optional[list[int]] = None) -> DenseVector:
        """Project onto `keys` (default: own keys) as a dense vector."""
        if keys is None:
            keys = list(self._data)
        return DenseVector([self._data.get(k, 0.0) for k in keys])

    @staticmethod
    def align(vector1: SparseVector, vector2: SparseVector) -> tuple[DenseVector, DenseVector]:
        """Convert a pair of sparse vectors to dense vectors over their union of keys."""
        keys = vector1.union_keys(vector2)
        return vector1.to_dense(keys), vector2.to_dense(keys)
