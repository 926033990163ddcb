"""Bulk neighbour searches over many query points."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, NamedTuple, Optional, Tuple, Union

import numpy as np

from tsneighbors.config import get_config
from tsneighbors.index import KdTree
from tsneighbors.index.base import (
    InsufficientNeighbors,
    NeighborResult,
    SpatialIndex,
    WindowTooLarge,
)
from tsneighbors.index.metrics import Metric
from tsneighbors.query import NeighborNumber, QuerySpec, WithinRange
from tsneighbors.theiler import Theiler

_LOGGER = logging.getLogger(__name__)

_ON_INSUFFICIENT = ("raise", "truncate")


class BulkResult(NamedTuple):
    """Parallel per-query neighbour ids and distances, in query order."""

    idxs: List[Tuple[int, ...]]
    dists: List[Tuple[float, ...]]

    def result(self, i: int) -> NeighborResult:
        """Neighbours of the ``i``-th query."""
        return NeighborResult(ids=self.idxs[i], distances=self.dists[i])


def _as_theiler(theiler: Union[Theiler, int, None]) -> Theiler:
    if theiler is None:
        return Theiler(0)
    if isinstance(theiler, Theiler):
        return theiler
    return Theiler(theiler)


def _prepare_queries(index: SpatialIndex, queries) -> np.ndarray:
    arr = np.asarray(queries, dtype=float)
    if arr.size == 0:
        return arr.reshape(0, index.dim)
    if arr.ndim == 1 and index.dim == 1:
        arr = arr.reshape(-1, 1)
    if arr.ndim != 2 or arr.shape[1] != index.dim:
        raise ValueError(
            f"queries must have shape (M, {index.dim}), got {arr.shape}"
        )
    if not np.all(np.isfinite(arr)):
        raise ValueError("query coordinates must be finite")
    return arr


def bulksearch(
    index: SpatialIndex,
    queries: Iterable[Iterable[float]],
    spec: QuerySpec,
    theiler: Union[Theiler, int, None] = None,
    *,
    n_jobs: Optional[int] = None,
    on_insufficient: Optional[str] = None,
) -> BulkResult:
    """Search the neighbours of every point in ``queries``.

    Parameters
    ----------
    index:
        Built index over the data the neighbours are drawn from.
    queries:
        Points to search for, shape ``(M, D)``.
    spec:
        ``NeighborNumber(k)`` or ``WithinRange(r)``.
    theiler:
        ``Theiler`` window, or a plain integer ``w``. Query ``i`` has temporal
        index ``theiler.nidxs[i]`` (or ``i`` without ``nidxs``).
    n_jobs:
        Number of worker threads; defaults to the configured ``n_jobs``.
    on_insufficient:
        What to do when a k-NN query has fewer than ``k`` eligible points:
        ``"raise"`` raises ``InsufficientNeighbors`` for the first such query
        in input order, ``"truncate"`` returns the shorter list and logs a
        warning.

    Returns
    -------
    BulkResult
        ``(idxs, dists)`` with one entry per query, in input order.

    Raises
    ------
    WindowTooLarge
        If ``theiler.w >= len(index) - 1``; raised before any search runs.
    """

    if not isinstance(index, SpatialIndex):
        raise TypeError("index must be a SpatialIndex")
    if not isinstance(spec, (NeighborNumber, WithinRange)):
        raise TypeError(f"unsupported search type {type(spec).__name__}")

    theiler = _as_theiler(theiler)
    if theiler.w >= index.size - 1:
        raise WindowTooLarge(theiler.w, index.size)

    config = get_config()
    n_jobs = config.n_jobs if n_jobs is None else n_jobs
    if n_jobs < 1:
        raise ValueError("n_jobs must be positive")
    policy = config.on_insufficient if on_insufficient is None else on_insufficient
    if policy not in _ON_INSUFFICIENT:
        raise ValueError(f"on_insufficient must be one of {_ON_INSUFFICIENT}, got '{policy}'")

    points = _prepare_queries(index, queries)
    m = points.shape[0]
    if theiler.nidxs is not None and theiler.nidxs.shape[0] != m:
        raise ValueError(
            f"Theiler window has {theiler.nidxs.shape[0]} temporal indices for {m} queries"
        )

    _LOGGER.debug(
        "bulksearch queries=%d spec=%s w=%d n_jobs=%d index=%s",
        m,
        spec,
        theiler.w,
        n_jobs,
        type(index).__name__,
    )

    def _search_one(i: int) -> NeighborResult:
        exclude = theiler.mask_for(i)
        try:
            return index.search(points[i], spec, exclude=exclude)
        except InsufficientNeighbors as exc:
            if policy == "raise":
                raise InsufficientNeighbors(exc.k, exc.available, query_index=i) from exc
            _LOGGER.warning(
                "query %d: only %d of k=%d neighbours are eligible (w=%d); truncating",
                i,
                exc.available,
                exc.k,
                theiler.w,
            )
            if exc.available == 0:
                return NeighborResult(ids=())
            return index.knn(points[i], exc.available, exclude=exclude)

    if n_jobs == 1 or m < 2:
        results = [_search_one(i) for i in range(m)]
    else:
        with ThreadPoolExecutor(max_workers=n_jobs) as pool:
            results = list(pool.map(_search_one, range(m)))

    return BulkResult(
        idxs=[r.ids for r in results],
        dists=[r.distances for r in results],
    )


def bulkisearch(
    index: SpatialIndex,
    queries: Iterable[Iterable[float]],
    spec: QuerySpec,
    theiler: Union[Theiler, int, None] = None,
    *,
    n_jobs: Optional[int] = None,
    on_insufficient: Optional[str] = None,
) -> List[Tuple[int, ...]]:
    """Like ``bulksearch`` but return neighbour ids only."""
    return bulksearch(
        index,
        queries,
        spec,
        theiler,
        n_jobs=n_jobs,
        on_insufficient=on_insufficient,
    ).idxs


def all_neighbors(
    dataset,
    spec: QuerySpec,
    w: int = 0,
    *,
    metric: Union[str, Metric, None] = None,
    leafsize: Optional[int] = None,
    n_jobs: Optional[int] = None,
    on_insufficient: Optional[str] = None,
) -> BulkResult:
    """Find the neighbours of all points of ``dataset`` within ``dataset``.

    Builds a ``KdTree`` over the dataset and searches it with every one of
    its own points, point ``i`` having temporal index ``i``. ``w`` is the
    Theiler window.
    """

    tree = KdTree(dataset, metric, leafsize=leafsize)
    return bulksearch(
        tree,
        tree.data,
        spec,
        Theiler(w),
        n_jobs=n_jobs,
        on_insufficient=on_insufficient,
    )


def windowed_neighbors(
    index: SpatialIndex,
    queries: Iterable[Iterable[float]],
    nidxs: Iterable[int],
    k: int,
    w: int,
) -> BulkResult:
    """``k`` nearest neighbours of ``queries`` whose temporal indices are ``nidxs``.

    Typical use is a subset of an embedding searched against the full
    embedding, excluding neighbours within ``w`` steps of each query.
    """

    if w >= index.size - 1:
        raise WindowTooLarge(w, index.size)
    return bulksearch(index, queries, NeighborNumber(k), Theiler(w, list(nidxs)))
