"""Static nearest-neighbour indices."""

from .base import (
    EmptyDataset,
    InsufficientNeighbors,
    InvalidQuerySpec,
    NeighborResult,
    NeighborSearchError,
    SpatialIndex,
    UnsupportedMetric,
    WindowTooLarge,
)
from .kdtree import KdTree
from .metrics import Chebyshev, Cityblock, Cosine, Euclidean, Metric, get_metric
from .naive import NaiveIndex

__all__ = [
    "Chebyshev",
    "Cityblock",
    "Cosine",
    "EmptyDataset",
    "Euclidean",
    "InsufficientNeighbors",
    "InvalidQuerySpec",
    "KdTree",
    "Metric",
    "NaiveIndex",
    "NeighborResult",
    "NeighborSearchError",
    "SpatialIndex",
    "UnsupportedMetric",
    "WindowTooLarge",
    "get_metric",
]
