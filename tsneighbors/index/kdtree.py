"""Balanced k-d tree with branch-and-bound k-NN and radius search."""

from __future__ import annotations

import heapq
import logging
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np

from tsneighbors.config import get_config

from .base import (
    ExcludeFn,
    InsufficientNeighbors,
    NeighborResult,
    SpatialIndex,
    validate_k,
    validate_radius,
)
from .metrics import Metric

_LOGGER = logging.getLogger(__name__)


class KdTree(SpatialIndex):
    """Static k-d tree over a dataset.

    Every node covers a contiguous slice ``[start, end)`` of a permutation of
    the point ids and stores the bounding box of its points. Internal nodes
    split at the median of the widest dimension, so sibling subtrees differ in
    size by at most one point and the depth stays logarithmic. Leaves keep at
    most ``leafsize`` ids, except when all of their points coincide.

    Pruning uses the metric's per-axis lower bound on the distance from the
    query to a node's box, so any ``Metric`` flagged ``decomposable`` is
    accepted and the others (cosine) are rejected.
    """

    _SUPPORTED: Tuple[str, ...] = ("l2", "linf", "l1")

    @classmethod
    def supported_metrics(cls) -> Tuple[str, ...]:
        return cls._SUPPORTED

    @classmethod
    def supports_metric(cls, metric: Metric) -> bool:
        # Box pruning is only sound for per-axis reductions.
        return metric.decomposable

    def __init__(
        self,
        data,
        metric: Union[str, Metric, None] = None,
        *,
        leafsize: Optional[int] = None,
    ) -> None:
        config = get_config()
        super().__init__(data, metric=config.metric if metric is None else metric)

        leafsize = config.leafsize if leafsize is None else leafsize
        if leafsize < 1:
            raise ValueError("leafsize must be positive")
        self._leafsize = int(leafsize)

        self._perm = np.arange(self.size, dtype=np.intp)
        # Filled as lists while building, frozen into arrays afterwards.
        self._starts = []
        self._ends = []
        self._split_dims = []
        self._split_values = []
        self._lefts = []
        self._rights = []
        self._lowers = []
        self._uppers = []
        self._depth = 0

        self._build_node(0, self.size, 0)
        self._freeze()

        _LOGGER.debug(
            "built kd-tree n=%d dim=%d metric=%s leafsize=%d nodes=%d leaves=%d depth=%d",
            self.size,
            self.dim,
            self.metric.name,
            self._leafsize,
            len(self._starts),
            self.n_leaves,
            self._depth,
        )

    @property
    def leafsize(self) -> int:
        return self._leafsize

    @property
    def depth(self) -> int:
        """Number of edges on the longest root-to-leaf path."""
        return self._depth

    @property
    def n_leaves(self) -> int:
        return int(np.count_nonzero(self._lefts < 0))

    def leaf_ids(self) -> List[Tuple[int, ...]]:
        """Point ids held by each leaf, in tree order."""
        return [
            tuple(int(i) for i in self._perm[self._starts[node] : self._ends[node]])
            for node in range(len(self._starts))
            if self._lefts[node] < 0
        ]

    def _build_node(self, start: int, end: int, depth: int) -> int:
        ids = self._perm[start:end]
        points = self._data[ids]
        lower = points.min(axis=0)
        upper = points.max(axis=0)

        node = len(self._starts)
        self._starts.append(start)
        self._ends.append(end)
        self._lowers.append(lower)
        self._uppers.append(upper)
        self._split_dims.append(-1)
        self._split_values.append(np.nan)
        self._lefts.append(-1)
        self._rights.append(-1)
        self._depth = max(self._depth, depth)

        spread = upper - lower
        dim = int(np.argmax(spread))
        if end - start <= self._leafsize or spread[dim] <= 0.0:
            return node

        mid = (end - start) // 2
        order = np.argpartition(points[:, dim], mid)
        self._perm[start:end] = ids[order]

        self._split_dims[node] = dim
        self._split_values[node] = float(points[order[mid], dim])
        self._lefts[node] = self._build_node(start, start + mid, depth + 1)
        self._rights[node] = self._build_node(start + mid, end, depth + 1)
        return node

    def _freeze(self) -> None:
        self._starts = np.asarray(self._starts, dtype=np.intp)
        self._ends = np.asarray(self._ends, dtype=np.intp)
        self._split_dims = np.asarray(self._split_dims, dtype=np.intp)
        self._split_values = np.asarray(self._split_values, dtype=float)
        self._lefts = np.asarray(self._lefts, dtype=np.intp)
        self._rights = np.asarray(self._rights, dtype=np.intp)
        self._lowers = np.vstack(self._lowers)
        self._uppers = np.vstack(self._uppers)
        for arr in (
            self._perm,
            self._starts,
            self._ends,
            self._split_dims,
            self._split_values,
            self._lefts,
            self._rights,
            self._lowers,
            self._uppers,
        ):
            arr.setflags(write=False)

    def _bound(self, node: int, query: np.ndarray) -> float:
        return self._metric.min_distance(query, self._lowers[node], self._uppers[node])

    def _children(self, node: int, query: np.ndarray) -> Tuple[int, int]:
        """Return ``(near, far)`` children of an internal node."""
        if query[self._split_dims[node]] < self._split_values[node]:
            return int(self._lefts[node]), int(self._rights[node])
        return int(self._rights[node]), int(self._lefts[node])

    def _leaf_candidates(
        self, node: int, query: np.ndarray, exclude: Optional[ExcludeFn]
    ) -> Tuple[np.ndarray, np.ndarray]:
        ids = self._perm[self._starts[node] : self._ends[node]]
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
        query = self._prepare_query(point)

        # Max-heap of the best k so far, keyed on (distance, id).
        heap: List[Tuple[float, int]] = []
        stack: List[Tuple[float, int]] = [(self._bound(0, query), 0)]

        while stack:
            bound, node = stack.pop()
            if len(heap) == k and bound > -heap[0][0]:
                continue

            if self._lefts[node] < 0:
                ids, dists = self._leaf_candidates(node, query, exclude)
                for pid, dist in zip(ids.tolist(), dists.tolist()):
                    if len(heap) < k:
                        heapq.heappush(heap, (-dist, -pid))
                    elif (dist, pid) < (-heap[0][0], -heap[0][1]):
                        heapq.heapreplace(heap, (-dist, -pid))
                continue

            near, far = self._children(node, query)
            # Far child goes on the stack first so the near one is explored first.
            stack.append((self._bound(far, query), far))
            stack.append((self._bound(near, query), near))

        if len(heap) < k:
            raise InsufficientNeighbors(k, len(heap))

        return NeighborResult.from_iterables(
            (-pid for _, pid in heap),
            (-dist for dist, _ in heap),
        )

    def within(
        self,
        point: Iterable[float],
        radius: float,
        *,
        exclude: Optional[ExcludeFn] = None,
    ) -> NeighborResult:
        radius = validate_radius(radius)
        query = self._prepare_query(point)

        found_ids: List[np.ndarray] = []
        found_dists: List[np.ndarray] = []
        stack = [0]

        while stack:
            node = stack.pop()
            if self._bound(node, query) > radius:
                continue

            if self._lefts[node] < 0:
                ids, dists = self._leaf_candidates(node, query, exclude)
                hits = dists <= radius
                found_ids.append(ids[hits])
                found_dists.append(dists[hits])
                continue

            near, far = self._children(node, query)
            stack.append(far)
            stack.append(near)

        if not found_ids:
            return NeighborResult(ids=())
        return NeighborResult.from_iterables(
            np.concatenate(found_ids), np.concatenate(found_dists)
        )
