"""Process-wide search defaults read from ``TSNEIGHBORS_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

_LOGGER = logging.getLogger("tsneighbors")

_ON_INSUFFICIENT = {"raise", "truncate"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

_DEFAULT_METRIC = "euclidean"
_DEFAULT_LEAFSIZE = 16
_DEFAULT_N_JOBS = 1
_DEFAULT_ON_INSUFFICIENT = "raise"
_DEFAULT_LOG_LEVEL = "WARNING"


def _parse_positive_int(raw: str | None, *, name: str, default: int) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got '{raw}'") from exc
    if value < 1:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _parse_choice(raw: str | None, *, name: str, choices: set, default: str, upper: bool = False) -> str:
    if raw is None or not raw.strip():
        return default
    value = raw.strip().upper() if upper else raw.strip().lower()
    if value not in choices:
        raise ValueError(f"Unsupported {name} '{raw}'. Expected one of {sorted(choices)}.")
    return value


@dataclass(frozen=True)
class SearchConfig:
    """Defaults applied when indices and bulk searches are not given explicit values."""

    metric: str = _DEFAULT_METRIC
    leafsize: int = _DEFAULT_LEAFSIZE
    n_jobs: int = _DEFAULT_N_JOBS
    on_insufficient: str = _DEFAULT_ON_INSUFFICIENT
    log_level: str = _DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        from tsneighbors.index.metrics import ensure_canonical_metric  # Local import to avoid cycles.

        ensure_canonical_metric(self.metric)
        if self.leafsize < 1:
            raise ValueError("leafsize must be positive")
        if self.n_jobs < 1:
            raise ValueError("n_jobs must be positive")
        if self.on_insufficient not in _ON_INSUFFICIENT:
            raise ValueError(
                f"on_insufficient must be one of {sorted(_ON_INSUFFICIENT)}, got '{self.on_insufficient}'"
            )
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}, got '{self.log_level}'")

    @classmethod
    def from_env(cls) -> "SearchConfig":
        metric = os.getenv("TSNEIGHBORS_METRIC", _DEFAULT_METRIC).strip() or _DEFAULT_METRIC
        leafsize = _parse_positive_int(
            os.getenv("TSNEIGHBORS_LEAFSIZE"), name="TSNEIGHBORS_LEAFSIZE", default=_DEFAULT_LEAFSIZE
        )
        n_jobs = _parse_positive_int(
            os.getenv("TSNEIGHBORS_N_JOBS"), name="TSNEIGHBORS_N_JOBS", default=_DEFAULT_N_JOBS
        )
        on_insufficient = _parse_choice(
            os.getenv("TSNEIGHBORS_ON_INSUFFICIENT"),
            name="TSNEIGHBORS_ON_INSUFFICIENT",
            choices=_ON_INSUFFICIENT,
            default=_DEFAULT_ON_INSUFFICIENT,
        )
        log_level = _parse_choice(
            os.getenv("TSNEIGHBORS_LOG_LEVEL"),
            name="TSNEIGHBORS_LOG_LEVEL",
            choices=_LOG_LEVELS,
            default=_DEFAULT_LOG_LEVEL,
            upper=True,
        )
        return cls(
            metric=metric,
            leafsize=leafsize,
            n_jobs=n_jobs,
            on_insufficient=on_insufficient,
            log_level=log_level,
        )


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a stream handler to the package logger (once).

    ``level`` defaults to the ``log_level`` of the active configuration.
    """

    if level is None:
        level = get_config().log_level
    level = _parse_choice(level, name="log level", choices=_LOG_LEVELS, default=_DEFAULT_LOG_LEVEL, upper=True)
    logger = logging.getLogger("tsneighbors")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        formatter = logging.Formatter("%(levelname)s %(name)s: %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)


_CONFIG_CACHE: Optional[SearchConfig] = None


def get_config() -> SearchConfig:
    """Return the active configuration, reading the environment on first use."""

    global _CONFIG_CACHE
    if _CONFIG_CACHE is None:
        _CONFIG_CACHE = SearchConfig.from_env()
        _LOGGER.debug("resolved search config %s", _CONFIG_CACHE)
    return _CONFIG_CACHE


def set_config(config: SearchConfig) -> None:
    global _CONFIG_CACHE
    if not isinstance(config, SearchConfig):
        raise TypeError("config must be a SearchConfig")
    _CONFIG_CACHE = config


def reset_config_cache() -> None:
    global _CONFIG_CACHE
    _CONFIG_CACHE = None
