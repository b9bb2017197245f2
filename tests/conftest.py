"""Pytest configuration and fixtures."""

import os
import pytest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from qrgen.app import create_app
from qrgen.cache.store import QRCacheStore
from qrgen.core import create_container
from qrgen.core.config import Settings
from qrgen.encoding.qr import QREncoder
from qrgen.handlers.qr import QRHandler
from qrgen.monitoring.metrics import MetricsCollector


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ.setdefault("QRGEN_LOG_LEVEL", "DEBUG")


# ============================================================================
# Helpers
# ============================================================================

class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def clock():
    """Fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def store(clock):
    """Cache store on the fake clock."""
    return QRCacheStore(max_keys=100, clock=clock)


@pytest.fixture
def metrics():
    """Metrics collector with a private registry."""
    return MetricsCollector()


@pytest.fixture
def mock_encoder():
    """Encoder stub returning fixed bytes."""
    encoder = MagicMock(spec=QREncoder)
    encoder.encode.return_value = PNG_SIGNATURE + b"fake-image"
    return encoder


@pytest.fixture
def handler(store, mock_encoder, metrics):
    """QR handler with a stubbed encoder."""
    return QRHandler(store, mock_encoder, metrics)


# ============================================================================
# HTTP Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings, isolated from the process environment file."""
    return Settings(_env_file=None, environment="test", log_level="DEBUG")


@pytest.fixture
def container(settings):
    """Dependency injection container for testing."""
    return create_container(settings)


@pytest.fixture
def app(settings, container):
    """Application under test."""
    return create_app(settings, container)


@pytest.fixture
def client(app):
    """Test client running the app lifespan."""
    with TestClient(app) as test_client:
        yield test_client
