# tests/test_logging.py
"""
Test the JSON log formatter and keyword-field logger.

All tests are non-DB.
"""

import json
import logging

from runway_ops.logging import StructuredLogFormatter, get_logger


class _Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


class TestStructuredLogging:
    """Structured fields end up in the JSON line."""

    def _capture(self, name):
        handler = _Capture()
        logging.getLogger(name).addHandler(handler)
        return handler

    def test_fields_in_json(self):
        handler = self._capture("runway_ops.tests.fields")
        get_logger("runway_ops.tests.fields").warning(
            "weather_fetch_failed", consecutive_failures=3
        )

        line = json.loads(StructuredLogFormatter().format(handler.records[-1]))
        assert line["message"] == "weather_fetch_failed"
        assert line["level"] == "WARNING"
        assert line["consecutive_failures"] == 3
        assert "source" not in line

    def test_exception_carries_traceback_and_source(self):
        handler = self._capture("runway_ops.tests.errors")
        try:
            raise RuntimeError("provider exploded")
        except RuntimeError:
            get_logger("runway_ops.tests.errors").exception("scheduled_refresh_crashed")

        line = json.loads(StructuredLogFormatter().format(handler.records[-1]))
        assert line["level"] == "ERROR"
        assert "provider exploded" in line["exception"]
        assert line["source"]["function"] == "test_exception_carries_traceback_and_source"
