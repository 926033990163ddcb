import numpy as np
import pytest

from tsneighbors.index.metrics import (
    Chebyshev,
    Cityblock,
    Cosine,
    Euclidean,
    canonical_metrics,
    ensure_canonical_metric,
    get_metric,
)


def test_metric_normalization_strictness():
    assert ensure_canonical_metric("linf") == "linf"
    assert ensure_canonical_metric("L2") == "l2"
    assert "linf" in canonical_metrics()

    with pytest.raises(ValueError):
        ensure_canonical_metric("hamming")

    with pytest.raises(TypeError):
        ensure_canonical_metric(123)  # type: ignore[arg-type]


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Euclidean", "l2"),
        ("chebyshev", "linf"),
        ("infinity", "linf"),
        ("cityblock", "l1"),
        ("Manhattan", "l1"),
        (" cosine ", "cosine"),
    ],
)
def test_metric_synonyms(name, expected):
    assert ensure_canonical_metric(name) == expected


def test_get_metric_resolves_names_and_instances():
    assert isinstance(get_metric("euclidean"), Euclidean)
    assert isinstance(get_metric("chebyshev"), Chebyshev)
    assert isinstance(get_metric("cityblock"), Cityblock)
    assert isinstance(get_metric("cosine"), Cosine)

    metric = Chebyshev()
    assert get_metric(metric) is metric
    assert get_metric("linf") == metric


def test_pointwise_distances():
    a, b = (0.0, 0.0), (3.0, -4.0)
    assert Euclidean().distance(a, b) == pytest.approx(5.0)
    assert Chebyshev().distance(a, b) == pytest.approx(4.0)
    assert Cityblock().distance(a, b) == pytest.approx(7.0)


def test_distance_dimension_mismatch():
    with pytest.raises(ValueError):
        Euclidean().distance((0.0, 0.0), (1.0,))


def test_vectorized_distances_match_pointwise():
    rng = np.random.default_rng(3)
    points = rng.normal(size=(20, 4))
    query = rng.normal(size=4)
    for metric in (Euclidean(), Chebyshev(), Cityblock(), Cosine()):
        expected = [metric.distance(p, query) for p in points]
        assert np.allclose(metric.distances(points, query), expected)


def test_cosine_distance_values():
    cosine = Cosine()
    assert cosine.distance((1.0, 0.0), (2.0, 0.0)) == pytest.approx(0.0)
    assert cosine.distance((1.0, 0.0), (0.0, 3.0)) == pytest.approx(1.0)
    assert cosine.distance((1.0, 0.0), (-1.0, 0.0)) == pytest.approx(2.0)
    assert cosine.distance((0.0, 0.0), (1.0, 1.0)) == pytest.approx(0.0)


def test_decomposable_flags():
    assert Euclidean.decomposable
    assert Chebyshev.decomposable
    assert Cityblock.decomposable
    assert not Cosine.decomposable
    with pytest.raises(NotImplementedError):
        Cosine().reduce(np.zeros((1, 2)))


@pytest.mark.parametrize("metric", [Euclidean(), Chebyshev(), Cityblock()])
def test_min_distance_is_lower_bound(metric):
    rng = np.random.default_rng(11)
    points = rng.uniform(-1.0, 1.0, size=(50, 3))
    lower, upper = points.min(axis=0), points.max(axis=0)

    for query in rng.uniform(-3.0, 3.0, size=(25, 3)):
        bound = metric.min_distance(query, lower, upper)
        assert bound <= metric.distances(points, query).min() + 1e-12


def test_min_distance_inside_box_is_zero():
    lower, upper = np.zeros(2), np.ones(2)
    assert Euclidean().min_distance(np.array([0.5, 0.5]), lower, upper) == 0.0
    assert Cityblock().min_distance(np.array([2.0, 3.0]), lower, upper) == pytest.approx(3.0)
    assert Chebyshev().min_distance(np.array([2.0, 3.0]), lower, upper) == pytest.approx(2.0)
