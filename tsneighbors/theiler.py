"""Theiler window: exclusion of temporally close neighbours."""

from __future__ import annotations

import numbers
from typing import Optional, Sequence

import numpy as np

from tsneighbors.index.base import ExcludeFn


def excluded(query_index: int, candidate_index: int, w: int) -> bool:
    """Whether ``candidate_index`` lies inside the window ``w`` around ``query_index``.

    ``w=0`` excludes nothing and ``w=1`` excludes only the query itself.
    """

    return abs(query_index - candidate_index) < w


class Theiler:
    """Theiler window ``w`` with optional temporal indices of the queries.

    Parameters
    ----------
    w:
        Minimum temporal separation a neighbour must have from its query.
    nidxs:
        Temporal index of each query in the indexed data. When omitted the
        ``i``-th query is taken to be the ``i``-th data point, which is the
        case when a dataset is searched against itself.
    """

    def __init__(self, w: int = 0, nidxs: Optional[Sequence[int]] = None) -> None:
        if isinstance(w, bool) or not isinstance(w, numbers.Integral):
            raise ValueError(f"Theiler window must be an integer, got {w!r}")
        if w < 0:
            raise ValueError(f"Theiler window must be non-negative, got {w}")
        self._w = int(w)

        self._nidxs: Optional[np.ndarray] = None
        if nidxs is not None:
            arr = np.asarray(nidxs)
            if arr.ndim != 1 or (arr.size and not np.issubdtype(arr.dtype, np.integer)):
                raise ValueError("nidxs must be a one-dimensional sequence of integers")
            self._nidxs = arr.astype(np.intp)
            self._nidxs.setflags(write=False)

    @property
    def w(self) -> int:
        return self._w

    @property
    def nidxs(self) -> Optional[np.ndarray]:
        return self._nidxs

    def temporal_index(self, i: int) -> int:
        """Temporal index of the ``i``-th query."""
        if self._nidxs is None:
            return i
        return int(self._nidxs[i])

    def mask_for(self, i: int) -> Optional[ExcludeFn]:
        """Exclusion callable for the ``i``-th query, or ``None`` when ``w == 0``."""
        if self._w == 0:
            return None
        n = self.temporal_index(i)
        w = self._w

        def _exclude(ids: np.ndarray) -> np.ndarray:
            return np.abs(ids - n) < w

        return _exclude

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Theiler):
            return NotImplemented
        if self._w != other._w:
            return False
        if self._nidxs is None or other._nidxs is None:
            return self._nidxs is None and other._nidxs is None
        return bool(np.array_equal(self._nidxs, other._nidxs))

    def __repr__(self) -> str:
        if self._nidxs is None:
            return f"Theiler(w={self._w})"
        return f"Theiler(w={self._w}, nidxs=<{self._nidxs.size} indices>)"
