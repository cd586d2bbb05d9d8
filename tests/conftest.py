"""Shared fixtures for function operator tests."""

import pytest
from prometheus_client import CollectorRegistry

from funcops.config import reset_config
from funcops.logging import configure_logging
from funcops.metrics import OperatorMetrics


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    """Route structlog through stdlib logging on stderr, warnings and up."""
    configure_logging(log_level="WARNING", json_logs=True)


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Each test starts from default settings, free of FUNCOPS_* env vars."""
    for name in [
        "FUNCOPS_DEFAULT_DELAY",
        "FUNCOPS_DOT_INTERVAL",
        "FUNCOPS_DOT_MARKER",
        "FUNCOPS_MEMO_MAX_SIZE",
        "FUNCOPS_METRICS_ENABLED",
    ]:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def registry():
    """Isolated Prometheus registry"""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    """Operator metrics bound to the isolated registry"""
    return OperatorMetrics(registry)
