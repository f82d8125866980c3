"""
Tests for structured logging setup.
"""

import json
import logging

import pytest
import structlog

from otpgate_core.log_setup import (
    JSONFormatter,
    bind_request_context,
    clear_request_context,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    clear_request_context()
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


class TestLogSetup:
    """Tests for setup_logging and request context binding."""

    def test_structlog_json_output(self, capsys):
        setup_logging("otpgate", level="INFO", json_output=True)
        bind_request_context(request_id="req_123")

        structlog.get_logger("otpgate.test").info("Code issued", purpose="signin")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "Code issued"
        assert event["purpose"] == "signin"
        assert event["service"] == "otpgate"
        assert event["request_id"] == "req_123"
        assert event["level"] == "info"

    def test_level_filters_debug(self, capsys):
        setup_logging("otpgate", level="WARNING")
        capsys.readouterr()

        structlog.get_logger("otpgate.test").info("Should not appear")

        assert capsys.readouterr().out == ""

    def test_clear_request_context_keeps_service(self):
        setup_logging("otpgate")
        bind_request_context(request_id="req_1", user_id="user-1")

        clear_request_context()

        assert structlog.contextvars.get_contextvars() == {"service": "otpgate"}

    def test_stdlib_records_formatted_as_json(self):
        setup_logging("otpgate")
        bind_request_context(request_id="req_9")
        record = logging.LogRecord("httpx", logging.INFO, __file__, 1, "HTTP Request: %s", ("POST",), None)

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "HTTP Request: POST"
        assert data["logger"] == "httpx"
        assert data["service"] == "otpgate"
        assert data["request_id"] == "req_9"
