"""
Tests for the shared structured logging configuration.
"""

import pytest
import structlog

from shared.logging import add_service_context, configure_logging


@pytest.fixture
def processors():
    """Configure logging and return the processor chain."""
    configure_logging("policy", "info")
    yield structlog.get_config()["processors"]
    structlog.reset_defaults()


def test_iso_timestamp_kept(processors):
    """Test events carry the ISO timestamp set by the TimeStamper."""
    start = next(
        index for index, processor in enumerate(processors)
        if isinstance(processor, structlog.processors.TimeStamper)
    )
    event = {"event": "Authorization DSL parsed", "logger": "policy.dsl_reader"}
    for processor in processors[start:-1]:
        event = processor(None, "info", event)

    assert isinstance(event["timestamp"], str)
    assert "T" in event["timestamp"]
    assert event["service"] == "policy"


def test_service_context_from_logger_name():
    """Test the service name is taken from the dotted logger name."""
    event = add_service_context(None, "info", {"logger": "policy.cli"})

    assert event["service"] == "policy"
