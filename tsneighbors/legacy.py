"""Deprecated neighbourhood interface.

``FixedMassNeighborhood``/``FixedSizeNeighborhood`` and ``neighborhood`` are
kept so that older call sites keep working. They only translate their
arguments into a ``NeighborNumber``/``WithinRange`` search with an optional
Theiler window; new code should use those together with
``SpatialIndex.search`` or ``bulksearch``.
"""

from __future__ import annotations

import warnings
from typing import Iterable, Optional, Tuple, Union

from tsneighbors.index.base import SpatialIndex
from tsneighbors.query import NeighborNumber, QuerySpec, WithinRange
from tsneighbors.theiler import Theiler


def _deprecated(message: str) -> None:
    warnings.warn(message, DeprecationWarning, stacklevel=3)


class AbstractNeighborhood:
    """Supertype of the deprecated neighbourhood definitions.

    * ``FixedMassNeighborhood(K)``: the ``K`` nearest neighbours of a point.
    * ``FixedSizeNeighborhood(eps)``: all neighbours within distance ``eps``.
    """

    def to_query(self) -> QuerySpec:
        raise NotImplementedError


class FixedMassNeighborhood(AbstractNeighborhood):
    def __init__(self, K: int = 1) -> None:
        _deprecated("FixedMassNeighborhood is deprecated in favor of NeighborNumber.")
        self.K = K

    def to_query(self) -> NeighborNumber:
        return NeighborNumber(self.K)

    def __repr__(self) -> str:
        return f"FixedMassNeighborhood(K={self.K})"


class FixedSizeNeighborhood(AbstractNeighborhood):
    def __init__(self, eps: float = 0.01) -> None:
        _deprecated("FixedSizeNeighborhood is deprecated in favor of WithinRange.")
        self.eps = float(eps)

    def to_query(self) -> WithinRange:
        return WithinRange(self.eps)

    def __repr__(self) -> str:
        return f"FixedSizeNeighborhood(eps={self.eps})"


def neighborhood(
    point: Iterable[float],
    tree: SpatialIndex,
    ntype: Union[FixedMassNeighborhood, FixedSizeNeighborhood],
    n: Optional[int] = None,
    w: int = 1,
) -> Tuple[int, ...]:
    """Return the ids forming the neighbourhood of ``point`` in ``tree``.

    When ``point`` belongs to the indexed data, i.e. ``point = data[n]``, pass
    ``n`` so that only points with ``abs(i - n) >= w`` are returned. The
    default ``w=1`` excludes the point itself. A window ``w <= 0`` excludes
    nothing. Without ``n`` nothing is excluded and ``w`` is ignored.
    """

    _deprecated(
        "`neighborhood` is deprecated in favor of `SpatialIndex.search` with "
        "NeighborNumber/WithinRange."
    )
    if not isinstance(ntype, AbstractNeighborhood):
        raise TypeError(f"unsupported neighborhood type {type(ntype).__name__}")

    exclude = None
    if n is not None:
        exclude = Theiler(max(w, 0), [n]).mask_for(0)
    return tree.isearch(point, ntype.to_query(), exclude=exclude)
