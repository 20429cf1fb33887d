"""
Test distance metrics (raw and unit-sphere) on dense and sparse vectors.
"""

import numpy as np
import pytest

from src.embedding.distance import (
    CosineDistance,
    EuclideanDistance,
    ManhattanDistance,
    get_metric,
)
from src.embedding.vectors import DenseVector, SparseVector, ShapeMismatchError

TOLERANCE = 1e-3

ALL_METRICS = [ManhattanDistance(), EuclideanDistance(), CosineDistance()]


@pytest.mark.parametrize("metric", ALL_METRICS, ids=lambda m: m.name)
def test_dense_same_vector_is_zero(metric):
    v1 = DenseVector([1, 2, 3])
    v2 = DenseVector([1, 2, 3])

    assert metric.distance(v1, v2) == pytest.approx(0.0, abs=TOLERANCE)
    assert metric.unit_sphere_distance(v1, v2) == pytest.approx(0.0, abs=TOLERANCE)


@pytest.mark.parametrize("metric, expected", [
    (ManhattanDistance(), 12.0),
    (EuclideanDistance(), 7.4833),
    (CosineDistance(), 2.0),
])
def test_dense_opposite_vectors(metric, expected):
    v1 = DenseVector([1, 2, 3])
    v2 = DenseVector([-1, -2, -3])

    assert metric.distance(v1, v2) == pytest.approx(expected, abs=TOLERANCE)


@pytest.mark.parametrize("metric, expected, expected_unit", [
    (ManhattanDistance(), 262656.0, 39.21),
    (EuclideanDistance(), 13397.074, 2.0),
    (CosineDistance(), 2.0, 2.0),
])
def test_dense_opposite_vectors_long(metric, expected, expected_unit):
    v1 = DenseVector(np.arange(1, 513, dtype=np.float64))
    v2 = DenseVector(-np.arange(1, 513, dtype=np.float64))

    assert metric.distance(v1, v2) == pytest.approx(expected, abs=1e-2)
    assert metric.unit_sphere_distance(v1, v2) == pytest.approx(expected_unit, abs=1e-2)


@pytest.mark.parametrize("metric, expected", [
    (ManhattanDistance(), 2.0),
    (EuclideanDistance(), 1.414),
    (CosineDistance(), 1.0),
])
def test_dense_perpendicular_vectors(metric, expected):
    v1 = DenseVector([1, 0, 0])
    v2 = DenseVector([0, 1, 0])

    assert metric.distance(v1, v2) == pytest.approx(expected, abs=TOLERANCE)


@pytest.mark.parametrize("metric", ALL_METRICS, ids=lambda m: m.name)
def test_similar_vectors_closer_than_different(metric):
    v1 = DenseVector([0.8, 0.6, 0.4])
    v2 = DenseVector([0.9, 0.7, 0.5])
    v3 = DenseVector([1, 2, 3])

    assert metric.distance(v1, v2) < metric.distance(v1, v3)
    assert metric.unit_sphere_distance(v1, v2) < metric.unit_sphere_distance(v1, v3)


@pytest.mark.parametrize("metric", ALL_METRICS, ids=lambda m: m.name)
def test_sparse_same_vector_is_zero(metric):
    v1 = SparseVector({1: 2, 2: 3, 3: 4})
    v2 = SparseVector({1: 2, 2: 3, 3: 4})

    assert metric.distance(v1, v2) == pytest.approx(0.0, abs=TOLERANCE)


@pytest.mark.parametrize("metric, expected", [
    (ManhattanDistance(), 18.0),
    (EuclideanDistance(), 10.77),
    (CosineDistance(), 2.0),
])
def test_sparse_opposite_vectors(metric, expected):
    v1 = SparseVector({1: 2, 2: 3, 3: 4})
    v2 = SparseVector({1: -2, 2: -3, 3: -4})

    assert metric.distance(v1, v2) == pytest.approx(expected, abs=TOLERANCE)


@pytest.mark.parametrize("metric, expected", [
    (ManhattanDistance(), 0.0),
    (EuclideanDistance(), 0.0),
    (CosineDistance(), 1.0),
])
def test_sparse_non_overlapping_defaults_to_shared_keys(metric, expected):
    """Manhattan/Euclidean only compare shared keys unless missing_as_zero is set."""
    v1 = SparseVector({1: 2, 2: 3, 3: 4})
    v2 = SparseVector({4: 2, 5: 3, 6: 4})

    assert metric.distance(v1, v2) == pytest.approx(expected, abs=TOLERANCE)


@pytest.mark.parametrize("metric, expected", [
    (ManhattanDistance(missing_as_zero=True), 18.0),
    (EuclideanDistance(missing_as_zero=True), 7.615),
])
def test_sparse_non_overlapping_missing_as_zero(metric, expected):
    v1 = SparseVector({1: 2, 2: 3, 3: 4})
    v2 = SparseVector({4: 2, 5: 3, 6: 4})

    assert metric.distance(v1, v2) == pytest.approx(expected, abs=TOLERANCE)


def test_sparse_unit_sphere_aligns_on_union():
    """Unit-sphere distance sees every dimension, even for intersection metrics."""
    v1 = SparseVector({1: 2, 2: 3, 3: 4})
    v2 = SparseVector({4: 2, 5: 3, 6: 4})

    assert EuclideanDistance().unit_sphere_distance(v1, v2) == pytest.approx(np.sqrt(2), abs=TOLERANCE)
    assert CosineDistance().unit_sphere_distance(v1, v2) == pytest.approx(1.0, abs=TOLERANCE)


def test_cosine_self_and_opposite():
    v = DenseVector([0.3, -1.2, 4.5, 2.0])
    neg = DenseVector([-0.3, 1.2, -4.5, -2.0])
    cosine = CosineDistance()

    assert cosine.distance(v, v) == pytest.approx(0.0, abs=TOLERANCE)
    assert cosine.distance(v, neg) == pytest.approx(2.0, abs=TOLERANCE)
    assert cosine.similarity(v, v) == pytest.approx(1.0, abs=TOLERANCE)


def test_cosine_zero_vector_is_guarded():
    """Near-zero magnitude is floored by epsilon instead of raising."""
    cosine = CosineDistance()

    assert cosine.distance(DenseVector([0, 0]), DenseVector([1, 1])) == pytest.approx(1.0)
    assert cosine.distance(SparseVector({}), SparseVector({1: 1.0})) == pytest.approx(1.0)


@pytest.mark.parametrize("metric", ALL_METRICS, ids=lambda m: m.name)
def test_metrics_are_commutative(metric):
    rng = np.random.default_rng(7)
    v1 = DenseVector(rng.normal(size=16))
    v2 = DenseVector(rng.normal(size=16))
    s1 = SparseVector({1: 0.5, 4: -2.0, 9: 1.0})
    s2 = SparseVector({4: 1.5, 9: 3.0, 12: -1.0})

    assert metric.distance(v1, v2) == pytest.approx(metric.distance(v2, v1))
    assert metric.unit_sphere_distance(v1, v2) == pytest.approx(metric.unit_sphere_distance(v2, v1))
    assert metric.distance(s1, s2) == pytest.approx(metric.distance(s2, s1))
    assert metric.unit_sphere_distance(s1, s2) == pytest.approx(metric.unit_sphere_distance(s2, s1))


@pytest.mark.parametrize("metric", ALL_METRICS, ids=lambda m: m.name)
def test_dense_length_mismatch_raises(metric):
    with pytest.raises(ShapeMismatchError):
        metric.distance(DenseVector([1, 2, 3]), DenseVector([1, 2]))
    with pytest.raises(ShapeMismatchError):
        metric.unit_sphere_distance(DenseVector([1, 2, 3]), DenseVector([1, 2]))


def test_mixed_vector_types_raise():
    with pytest.raises(TypeError):
        EuclideanDistance().distance(DenseVector([1, 2]), SparseVector({0: 1, 1: 2}))
    with pytest.raises(TypeError):
        CosineDistance().unit_sphere_distance(SparseVector({0: 1}), DenseVector([1]))


def test_metric_is_callable_as_unit_sphere_distance():
    v1 = DenseVector([1, 0])
    v2 = DenseVector([0, 5])
    metric = EuclideanDistance()

    assert v1.distance_to(v2, metric) == pytest.approx(np.sqrt(2))


def test_get_metric():
    assert isinstance(get_metric("manhattan"), ManhattanDistance)
    assert isinstance(get_metric("Euclidean"), EuclideanDistance)
    assert isinstance(get_metric("cosine"), CosineDistance)
    assert get_metric("euclidean", missing_as_zero=True).missing_as_zero is True

    with pytest.raises(ValueError):
        get_metric("chebyshev")


def test_unit_sphere_distance_with_zero_vector():
    """A zero vector stays zero after normalisation, so the distance is the other's unit length."""
    zero = DenseVector([0, 0])
    v = DenseVector([3, 4])

    assert EuclideanDistance().unit_sphere_distance(zero, v) == pytest.approx(1.0)
    assert ManhattanDistance().unit_sphere_distance(zero, v) == pytest.approx(1.4)
