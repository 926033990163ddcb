"""Canonical metric names and distance objects for the spatial indices."""

from __future__ import annotations

from typing import Dict, Tuple, Union

import numpy as np

_CANONICAL_METRICS: Tuple[str, ...] = ("l2", "linf", "l1", "cosine")

_SYNONYMS: Dict[str, str] = {
    "euclidean": "l2",
    "chebyshev": "linf",
    "infinity": "linf",
    "max": "linf",
    "cityblock": "l1",
    "manhattan": "l1",
    "taxicab": "l1",
}


def canonical_metrics() -> Tuple[str, ...]:
    """Return the tuple of supported canonical metric names."""

    return _CANONICAL_METRICS


def ensure_canonical_metric(metric: str) -> str:
    """Validate and normalise the metric name.

    Canonical names and the common synonyms ("euclidean", "chebyshev",
    "cityblock", ...) are accepted, case-insensitively.
    """

    if not isinstance(metric, str):
        raise TypeError("metric must be a string")

    normalized = metric.strip().lower()
    normalized = _SYNONYMS.get(normalized, normalized)
    if normalized not in _CANONICAL_METRICS:
        raise ValueError(
            f"unsupported metric '{metric}'. Supported metrics: {_CANONICAL_METRICS}"
        )
    return normalized


class Metric:
    """Distance between fixed-dimension points.

    A metric is *decomposable* when the distance is a monotone reduction of
    the per-axis absolute offsets. Only decomposable metrics give the
    per-axis lower bounds the k-d tree needs for pruning.
    """

    name: str = ""
    decomposable: bool = False

    def reduce(self, offsets: np.ndarray) -> np.ndarray:
        """Combine absolute per-axis offsets (last axis) into distances."""
        raise NotImplementedError(f"{type(self).__name__} is not decomposable")

    def distances(self, points: np.ndarray, query: np.ndarray) -> np.ndarray:
        """Distances from every row of ``points`` to ``query``."""
        return self.reduce(np.abs(points - query))

    def distance(self, a, b) -> float:
        lhs = np.asarray(a, dtype=float)
        rhs = np.asarray(b, dtype=float)
        if lhs.shape != rhs.shape:
            raise ValueError("points must share the same dimensionality")
        return float(self.distances(lhs.reshape(1, -1), rhs.reshape(-1))[0])

    def min_distance(self, query: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> float:
        """Smallest possible distance from ``query`` to the box [lower, upper]."""
        gaps = np.maximum(np.maximum(lower - query, query - upper), 0.0)
        return float(self.reduce(gaps))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Metric) and type(other) is type(self)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class Euclidean(Metric):
    name = "l2"
    decomposable = True

    def reduce(self, offsets: np.ndarray) -> np.ndarray:
        return np.sqrt(np.sum(offsets * offsets, axis=-1))


class Chebyshev(Metric):
    name = "linf"
    decomposable = True

    def reduce(self, offsets: np.ndarray) -> np.ndarray:
        return np.max(offsets, axis=-1)


class Cityblock(Metric):
    name = "l1"
    decomposable = True

    def reduce(self, offsets: np.ndarray) -> np.ndarray:
        return np.sum(offsets, axis=-1)


class Cosine(Metric):
    """Cosine distance ``1 - cos(a, b)``; zero vectors are at distance 0."""

    name = "cosine"

    def distances(self, points: np.ndarray, query: np.ndarray) -> np.ndarray:
        norms = np.linalg.norm(points, axis=-1) * np.linalg.norm(query)
        dots = points @ query
        with np.errstate(invalid="ignore", divide="ignore"):
            sims = np.where(norms > 0.0, dots / norms, 1.0)
        return 1.0 - np.clip(sims, -1.0, 1.0)


_METRICS: Dict[str, type] = {
    "l2": Euclidean,
    "linf": Chebyshev,
    "l1": Cityblock,
    "cosine": Cosine,
}


def get_metric(metric: Union[str, Metric]) -> Metric:
    """Resolve a metric name (or pass a ``Metric`` instance through)."""

    if isinstance(metric, Metric):
        return metric
    return _METRICS[ensure_canonical_metric(metric)]()
