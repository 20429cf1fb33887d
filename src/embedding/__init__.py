"""
Embedding vectors and the distance metrics defined over them.
"""

from .vectors import (
    EmbeddingVector,
    DenseVector,
    SparseVector,
    ShapeMismatchError,
)
from .distance import (
    EPSILON,
    DistanceMetric,
    ManhattanDistance,
    EuclideanDistance,
    CosineDistance,
    get_metric,
)
from .contracts import Vectorizer, Embedder

__all__ = [
    # Vectors
    "EmbeddingVector",
    "DenseVector",
    "SparseVector",
    "ShapeMismatchError",
    # Metrics
    "EPSILON",
    "DistanceMetric",
    "ManhattanDistance",
    "EuclideanDistance",
    "CosineDistance",
    "get_metric",
    # Upstream contracts
    "Vectorizer",
    "Embedder",
]
