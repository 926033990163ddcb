"""Search types: what counts as a neighbour of a query point."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from tsneighbors.index.base import validate_k, validate_radius


@dataclass(frozen=True)
class NeighborNumber:
    """The ``k`` nearest neighbours of a point."""

    k: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "k", validate_k(self.k))


@dataclass(frozen=True)
class WithinRange:
    """All neighbours at distance ``<= r`` from a point."""

    r: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "r", validate_radius(self.r))


QuerySpec = Union[NeighborNumber, WithinRange]
