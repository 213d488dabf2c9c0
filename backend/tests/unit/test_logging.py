"""Unit tests for structured log formatting"""

import json
import logging
from uuid import uuid4

import pytest

from inspex.observability.logging_config import JSONFormatter


pytestmark = pytest.mark.unit


def _record(message):
    return logging.LogRecord(
        "inspex.certifications.service", logging.INFO, __file__, 1, message, None, None,
    )


class TestJSONFormatter:
    def test_context_fields_are_promoted(self):
        record = _record("Door MF42-18-0006 certified")
        record.door_id = uuid4()
        record.request_id = "req-1"

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Door MF42-18-0006 certified"
        assert data["request_id"] == "req-1"
        assert data["door_id"] == str(record.door_id)
        assert "inspection_id" not in data

    def test_level_and_logger(self):
        data = json.loads(JSONFormatter().format(_record("hello")))
        assert data["level"] == "INFO"
        assert data["logger"] == "inspex.certifications.service"
