"""
Logging Setup
=============
Structured logging for services built on otpgate.

Components log through ``structlog.get_logger(__name__)``. Third-party
libraries (httpx, tenacity, redis) log through the standard library; their
records are formatted as JSON with the same service and request context.

Usage:
    from otpgate_core.log_setup import setup_logging, bind_request_context

    setup_logging(service_name="otpgate", level="INFO")
    bind_request_context(request_id="req_123")
"""

import json
import logging
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

import structlog

# Context variables for request tracking
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
service_name_var: ContextVar[str] = ContextVar("service_name", default="unknown")


class JSONFormatter(logging.Formatter):
    """Formats standard library log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service": service_name_var.get(),
            "request_id": request_id_var.get() or None,
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_data, default=str)


def setup_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        service_name: Name of the service (e.g., "otpgate")
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Whether to output JSON (for production)
    """
    service_name_var.set(service_name)
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        ))
    root_logger.addHandler(handler)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(sys.stdout),
        cache_logger_on_first_use=False,
    )
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)

    structlog.get_logger(__name__).info("Logging configured", service=service_name, level=level.upper())


def bind_request_context(**ids: Any) -> None:
    """
    Bind per-request identifiers to every log line emitted in this context.

    ``request_id`` also reaches standard library records.
    """
    if "request_id" in ids:
        request_id_var.set(str(ids["request_id"]))
    structlog.contextvars.bind_contextvars(**ids)


def clear_request_context() -> None:
    """Drop per-request identifiers bound by ``bind_request_context``."""
    request_id_var.set("")
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name_var.get())
