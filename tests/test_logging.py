"""
Test Logging Module
===================

Unit tests for logger naming, bound fields and formatters.
"""

import json
import logging

import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.logging import ColoredFormatter, JSONFormatter, ROOT_LOGGER, get_logger


class Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    """Logger with bound fields and a handler collecting its records."""
    logger = get_logger("tests.capture", component="documents")
    handler = Capture()
    logger.logger.addHandler(handler)
    yield logger, handler.records
    logger.logger.removeHandler(handler)


class TestGetLogger:
    """Tests for get_logger."""

    def test_names_are_prefixed(self):
        """Loggers live below the package logger."""
        assert get_logger("rules.loader").logger.name == f"{ROOT_LOGGER}.rules.loader"
        assert get_logger(ROOT_LOGGER).logger.name == ROOT_LOGGER

    def test_bind_adds_fields(self):
        """bind returns a new adapter with merged fields."""
        base = get_logger("rules.engine", component="engine")
        bound = base.bind(source="data.json")
        assert bound.extra == {"component": "engine", "source": "data.json"}
        assert base.extra == {"component": "engine"}


class TestFormatters:
    """Tests for the JSON and console formatters."""

    def test_json_includes_bound_fields(self, captured):
        """Bound and per-call fields become JSON keys."""
        logger, records = captured
        logger.warning("Skipping %s", "entry", extra={"source": "a.json"})

        payload = json.loads(JSONFormatter().format(records[0]))
        assert payload["message"] == "Skipping entry"
        assert payload["level"] == "WARNING"
        assert payload["component"] == "documents"
        assert payload["source"] == "a.json"

    def test_console_shows_component(self, captured):
        """Console lines carry the short name and component."""
        logger, records = captured
        logger.error("broken")

        line = ColoredFormatter().format(records[0])
        assert "tests.capture[documents]: broken" in line


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
