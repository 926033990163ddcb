"""Naive nearest neighbour index.

This index is intended for testing and fallback scenarios. It keeps the
dataset as a dense array and answers queries with a linear scan, so it works
for every metric, including ones the k-d tree cannot prune with.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple, Union

import numpy as np

from .base import (
    ExcludeFn,
    InsufficientNeighbors,
    NeighborResult,
    SpatialIndex,
    validate_k,
    validate_radius,
)
from .metrics import Metric, canonical_metrics


class NaiveIndex(SpatialIndex):
    """Brute-force index supporting every canonical metric."""

    @classmethod
    def supported_metrics(cls) -> Tuple[str, ...]:
        return canonical_metrics()

    @classmethod
    def supports_metric(cls, metric: Metric) -> bool:
        # Names are validated by get_metric; a linear scan works with any Metric.
        return True

    def __init__(self, data, metric: Union[str, Metric] = "euclidean") -> None:
        super().__init__(data, metric=metric)
        self._ids = np.arange(self.size, dtype=np.intp)

    def _scan(
        self, point: Iterable[float], exclude: Optional[ExcludeFn]
    ) -> Tuple[np.ndarray, np.ndarray]:
        query = self._prepare_query(point)
        ids = self._ids
        if exclude is not None:
            ids = ids[~exclude(ids)]
        return ids, self._metric.distances(self._data[ids], query)

    def knn(
        self,
        point: Iterable[float],
        k: int,
        *,
        exclude: Optional[ExcludeFn] = None,
    ) -> NeighborResult:
        k = validate_k(k)
        ids, distances = self._scan(point, exclude)

        if ids.size < k:
            raise InsufficientNeighbors(k, int(ids.size))

        top = np.lexsort((ids, distances))[:k]
        return NeighborResult.from_iterables(ids[top], distances[top])

    def within(
        self,
        point: Iterable[float],
        radius: float,
        *,
        exclude: Optional[ExcludeFn] = None,
    ) -> NeighborResult:
        radius = validate_radius(radius)
        ids, distances = self._scan(point, exclude)

        hits = distances <= radius
        return NeighborResult.from_iterables(ids[hits], distances[hits])
