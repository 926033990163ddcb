"""tsneighbors - exact neighbour search for time-series embeddings."""

__version__ = "1.0.0"

from .bulk import BulkResult, all_neighbors, bulkisearch, bulksearch, windowed_neighbors
from .config import SearchConfig, configure_logging, get_config, reset_config_cache, set_config
from .index import (
    Chebyshev,
    Cityblock,
    Cosine,
    EmptyDataset,
    Euclidean,
    InsufficientNeighbors,
    InvalidQuerySpec,
    KdTree,
    NaiveIndex,
    NeighborResult,
    NeighborSearchError,
    SpatialIndex,
    UnsupportedMetric,
    WindowTooLarge,
    get_metric,
)
from .legacy import FixedMassNeighborhood, FixedSizeNeighborhood, neighborhood
from .query import NeighborNumber, WithinRange
from .theiler import Theiler, excluded

__all__ = [
    "BulkResult",
    "Chebyshev",
    "Cityblock",
    "Cosine",
    "EmptyDataset",
    "Euclidean",
    "FixedMassNeighborhood",
    "FixedSizeNeighborhood",
    "InsufficientNeighbors",
    "InvalidQuerySpec",
    "KdTree",
    "NaiveIndex",
    "NeighborNumber",
    "NeighborResult",
    "NeighborSearchError",
    "SearchConfig",
    "SpatialIndex",
    "Theiler",
    "UnsupportedMetric",
    "WindowTooLarge",
    "WithinRange",
    "all_neighbors",
    "bulkisearch",
    "bulksearch",
    "configure_logging",
    "excluded",
    "get_config",
    "get_metric",
    "neighborhood",
    "reset_config_cache",
    "set_config",
    "windowed_neighbors",
]
