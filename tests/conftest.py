import pytest

from tsneighbors.config import reset_config_cache

_ENV_VARS = (
    "TSNEIGHBORS_METRIC",
    "TSNEIGHBORS_LEAFSIZE",
    "TSNEIGHBORS_N_JOBS",
    "TSNEIGHBORS_ON_INSUFFICIENT",
    "TSNEIGHBORS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_config(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture
def line_points():
    """Four collinear points and one outlier; row ``i`` has temporal index ``i``."""
    return [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0), (3.0, 0.0), (10.0, 10.0)]
