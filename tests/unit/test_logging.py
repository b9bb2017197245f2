"""Logging configuration tests."""

import logging

import pytest
import structlog

from qrgen.core.logging_config import LogContext, configure_logging, get_logger


@pytest.mark.unit
def test_log_context_binds_and_unbinds():
    """Request ids are attached only inside the context."""
    with LogContext(request_id="abc-123"):
        assert structlog.contextvars.get_contextvars()["request_id"] == "abc-123"

    assert "request_id" not in structlog.contextvars.get_contextvars()


@pytest.mark.unit
@pytest.mark.parametrize("json_logs", [False, True])
def test_configure_logging_sets_level(json_logs):
    """The root logger follows the configured level in both output modes."""
    configure_logging("WARNING", json_logs=json_logs)

    assert logging.getLogger().level == logging.WARNING
    get_logger(__name__).warning("cache_sweep_failed", error="boom")

    configure_logging("DEBUG")
