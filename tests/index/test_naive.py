import numpy as np
import pytest

from tsneighbors.index import InsufficientNeighbors, InvalidQuerySpec, NaiveIndex


def test_naive_linf_radius_handling_and_properties():
    index = NaiveIndex([(0.0, 0.0), (0.4, 0.4)], metric="linf")

    assert index.metric.name == "linf"
    assert index.size == 2

    result = index.within((0.1, 0.1), 0.5)
    assert result.ids == (0, 1)
    assert result.distances == pytest.approx((0.1, 0.3))

    assert index.within((0.1, 0.1), 0.2).ids == (0,)

    with pytest.raises(InvalidQuerySpec):
        index.within((0.0, 0.0), -1.0)


def test_naive_l2_support():
    index = NaiveIndex([(0.0, 0.0), (0.2, 0.2), (0.3, 0.3)], metric="l2")

    result = index.within((0.1, 0.1), 0.25)
    assert result.ids == (0, 1)

    distances = np.array(result.distances)
    expected = np.array([np.sqrt(0.02), np.sqrt(0.02)])
    assert np.allclose(distances, expected)


def test_naive_l1_support():
    index = NaiveIndex([(0.0, 0.0), (0.2, 0.1)], metric="l1")

    result = index.within((0.1, 0.05), 0.3)
    assert set(result.ids) == {0, 1}


def test_naive_knn_orders_and_breaks_ties(line_points):
    index = NaiveIndex(line_points)

    result = index.knn((2.0, 0.0), 3)
    assert result.ids == (2, 1, 3)
    assert result.distances == pytest.approx((0.0, 1.0, 1.0))


def test_naive_knn_exclusion_and_insufficient(line_points):
    index = NaiveIndex(line_points)

    def skip_low(ids):
        return ids < 3

    assert index.knn((0.0, 0.0), 2, exclude=skip_low).ids == (3, 4)

    with pytest.raises(InsufficientNeighbors) as info:
        index.knn((0.0, 0.0), 3, exclude=skip_low)
    assert info.value.available == 2


def test_naive_supports_cosine():
    index = NaiveIndex([(1.0, 0.0), (0.0, 1.0), (1.0, 1.0)], metric="cosine")
    result = index.knn((2.0, 0.1), 1)
    assert result.ids == (0,)


def test_naive_rejects_dimension_mismatch():
    index = NaiveIndex([(0.0, 0.0)])
    with pytest.raises(ValueError):
        index.knn((0.0,), 1)
    with pytest.raises(ValueError):
        index.within([[0.0, 0.0]], 1.0)


def test_naive_rejects_non_finite_query():
    index = NaiveIndex([(0.0, 0.0), (1.0, 1.0)])
    with pytest.raises(ValueError):
        index.knn((float("nan"), 0.0), 1)
    with pytest.raises(ValueError):
        index.within((0.0, float("inf")), 1.0)


def test_supported_metrics_reported_by_naive_index():
    assert set(NaiveIndex.supported_metrics()) == {"linf", "l2", "l1", "cosine"}
