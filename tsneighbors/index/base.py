"""Foundational classes for the nearest-neighbour indices."""

from __future__ import annotations

import math
import numbers
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple, Union

import numpy as np

from .metrics import Metric, get_metric

#: Callable receiving candidate ids and returning a mask of ids to skip.
ExcludeFn = Callable[[np.ndarray], np.ndarray]


class NeighborSearchError(Exception):
    """Base class for all errors raised by tsneighbors."""


class EmptyDataset(NeighborSearchError, ValueError):
    """Raised when an index is built over zero points."""

    def __init__(self) -> None:
        super().__init__("cannot build an index over an empty dataset")


class UnsupportedMetric(NeighborSearchError, ValueError):
    """Raised when an index cannot prune under the requested metric."""

    def __init__(self, metric: str, index: str) -> None:
        self.metric = metric
        self.index = index
        super().__init__(
            f"metric '{metric}' not supported by {index}: "
            "it has no per-axis decomposable lower bound"
        )


class WindowTooLarge(NeighborSearchError, ValueError):
    """Raised when a Theiler window would exclude every candidate."""

    def __init__(self, w: int, n: int) -> None:
        self.w = w
        self.n = n
        super().__init__(
            f"Theiler window w={w} is larger than the data span of {n} points "
            f"(requires w < {n - 1})"
        )


class InvalidQuerySpec(NeighborSearchError, ValueError):
    """Raised for a non-positive ``k`` or a negative/non-finite radius."""

    def __init__(self, message: str, value: object) -> None:
        self.value = value
        super().__init__(message)


class InsufficientNeighbors(NeighborSearchError, RuntimeError):
    """Raised when fewer than ``k`` points remain eligible for a query."""

    def __init__(self, k: int, available: int, query_index: Optional[int] = None) -> None:
        self.k = k
        self.available = available
        self.query_index = query_index
        where = "" if query_index is None else f" for query {query_index}"
        super().__init__(
            f"requested k={k} neighbours{where} but only {available} eligible points exist"
        )


def validate_k(k: object) -> int:
    if isinstance(k, bool) or not isinstance(k, numbers.Integral):
        raise InvalidQuerySpec(f"k must be an integer, got {k!r}", k)
    if k < 1:
        raise InvalidQuerySpec(f"k must be positive, got {k}", k)
    return int(k)


def validate_radius(radius: object) -> float:
    if isinstance(radius, bool) or not isinstance(radius, numbers.Real):
        raise InvalidQuerySpec(f"radius must be a real number, got {radius!r}", radius)
    value = float(radius)
    if not math.isfinite(value) or value < 0:
        raise InvalidQuerySpec(f"radius must be finite and non-negative, got {radius}", radius)
    return value


def as_dataset(data) -> np.ndarray:
    """Coerce ``data`` into a read-only (N, D) float64 array."""

    arr = np.array(data, dtype=float, order="C", copy=True)
    if arr.ndim == 1:
        # A scalar series is N one-dimensional points.
        arr = arr.reshape(-1, 1)
    if arr.ndim != 2:
        raise ValueError("dataset must be a two-dimensional (points x coordinates) array")
    if arr.shape[0] == 0:
        raise EmptyDataset()
    if arr.shape[1] == 0:
        raise ValueError("points must be non-empty sequences")
    if not np.all(np.isfinite(arr)):
        raise ValueError("dataset coordinates must be finite")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class NeighborResult:
    """Neighbours of a single query, ordered by ``(distance, id)``."""

    ids: Tuple[int, ...]
    distances: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        if len(self.ids) != len(self.distances):
            raise ValueError("ids and distances must have matching lengths")

        # Ties at equal distance go to the lower (earlier) id.
        if len(self.ids) > 1:
            sorted_pairs = sorted(zip(self.ids, self.distances), key=lambda x: (x[1], x[0]))
            sorted_ids, sorted_distances = zip(*sorted_pairs)
            object.__setattr__(self, "ids", tuple(sorted_ids))
            object.__setattr__(self, "distances", tuple(sorted_distances))

    @classmethod
    def from_iterables(
        cls,
        ids: Iterable[int],
        distances: Iterable[float],
    ) -> "NeighborResult":
        """Build a result from generic iterables while enforcing tuple storage."""
        ids_tuple = tuple(int(i) for i in ids)
        distances_tuple = tuple(float(d) for d in distances)
        return cls(ids=ids_tuple, distances=distances_tuple)

    def __len__(self) -> int:
        return len(self.ids)


class SpatialIndex(ABC):
    """Abstract interface for static nearest-neighbour indices.

    An index is built once over a dataset whose row ``i`` carries temporal
    index ``i``. Queries never mutate the index, so a built index may be
    shared read-only between threads.
    """

    def __init__(self, data, *, metric: Union[str, Metric]) -> None:
        self._metric = get_metric(metric)

        if not self.supports_metric(self._metric):
            raise UnsupportedMetric(self._metric.name, self.__class__.__name__)

        self._data = as_dataset(data)

    @classmethod
    @abstractmethod
    def supported_metrics(cls) -> Tuple[str, ...]:
        """Return the canonical metrics supported by the index."""

    @classmethod
    def supports_metric(cls, metric: Metric) -> bool:
        """Whether the index can answer queries under ``metric``.

        The default accepts the names listed by ``supported_metrics``; an
        empty tuple accepts everything.
        """
        supported = cls.supported_metrics()
        return not supported or metric.name in supported

    @property
    def metric(self) -> Metric:
        """Distance metric used by the index."""
        return self._metric

    @property
    def data(self) -> np.ndarray:
        """Read-only view of the indexed points."""
        return self._data

    @property
    def size(self) -> int:
        return int(self._data.shape[0])

    @property
    def dim(self) -> int:
        return int(self._data.shape[1])

    def __len__(self) -> int:
        return self.size

    def _prepare_query(self, point: Iterable[float]) -> np.ndarray:
        arr = np.asarray(point, dtype=float)
        if arr.ndim != 1:
            raise ValueError("points must be one-dimensional sequences")
        if arr.shape[0] != self.dim:
            raise ValueError(
                f"query dimensionality {arr.shape[0]} does not match indexed points ({self.dim})"
            )
        if not np.all(np.isfinite(arr)):
            raise ValueError("query coordinates must be finite")
        return arr

    @abstractmethod
    def knn(
        self,
        point: Iterable[float],
        k: int,
        *,
        exclude: Optional[ExcludeFn] = None,
    ) -> NeighborResult:
        """Return the ``k`` nearest eligible neighbours of ``point``.

        Raises
        ------
        InsufficientNeighbors
            If fewer than ``k`` points survive ``exclude``.
        """

    @abstractmethod
    def within(
        self,
        point: Iterable[float],
        radius: float,
        *,
        exclude: Optional[ExcludeFn] = None,
    ) -> NeighborResult:
        """Return every eligible neighbour at distance ``<= radius``."""

    def search(self, point: Iterable[float], spec, *, exclude: Optional[ExcludeFn] = None) -> NeighborResult:
        """Answer ``spec`` (``NeighborNumber`` or ``WithinRange``) for ``point``."""
        from tsneighbors.query import NeighborNumber, WithinRange  # Local import to avoid cycles.

        if isinstance(spec, NeighborNumber):
            return self.knn(point, spec.k, exclude=exclude)
        if isinstance(spec, WithinRange):
            return self.within(point, spec.r, exclude=exclude)
        raise TypeError(f"unsupported search type {type(spec).__name__}")

    def isearch(self, point: Iterable[float], spec, *, exclude: Optional[ExcludeFn] = None) -> Tuple[int, ...]:
        """Like ``search`` but return neighbour ids only."""
        return self.search(point, spec, exclude=exclude).ids
