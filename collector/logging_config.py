"""
Structured logging configuration for the deploy-events collector.

Provides JSON-formatted logs with a caller-supplied correlation_id so a
poll or a watcher pass can be followed across threads.

Environment Variables:
    DEPLOY_EVENTS_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR) - default: INFO
    DEPLOY_EVENTS_LOG_FORMAT: Log format (json, text) - default: json

Usage:
    from collector.logging_config import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__, correlation_id="op-42")
    logger.info("Watching workers", extra={"workers": 3})
"""

import logging
import os
import sys
from typing import Optional, TextIO

from pythonjsonlogger.json import JsonFormatter

LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class CorrelationIdFilter(logging.Filter):
    """
    Logging filter that adds correlation_id to all log records.

    Ensures the formatter always finds the field, even for records from
    third-party loggers or calls that did not pass one.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "N/A"  # type: ignore
        return True


def build_formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(correlation_id)s",
            rename_fields={
                "asctime": "timestamp",
                "name": "logger",
                "levelname": "level",
            },
        )
    return logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s [correlation_id=%(correlation_id)s]",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logging(
    level: Optional[str] = None,
    log_format: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure root logger with structured logging.

    Records go to stream (default: stdout). CLI commands whose stdout is a
    machine-readable document pass sys.stderr.

    Explicit arguments win over environment variables:
    - DEPLOY_EVENTS_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    - DEPLOY_EVENTS_LOG_FORMAT: json, text (default: json)
    """
    log_level = (level or os.getenv("DEPLOY_EVENTS_LOG_LEVEL", "INFO")).upper()
    fmt = (log_format or os.getenv("DEPLOY_EVENTS_LOG_FORMAT", "json")).lower()
    resolved = LEVEL_MAP.get(log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(resolved)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(resolved)
    handler.setFormatter(build_formatter(fmt))
    handler.addFilter(CorrelationIdFilter())
    root_logger.addHandler(handler)

    # Silence noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("kubernetes").setLevel(logging.WARNING)


def get_logger(name: str, correlation_id: Optional[str] = None) -> logging.LoggerAdapter:
    """
    Get a logger carrying a correlation_id.

    Args:
        name: Logger name (typically __name__)
        correlation_id: Id supplied by the caller (operation id, request id, worker name)

    Returns:
        LoggerAdapter with correlation_id in extra fields
    """
    logger = logging.getLogger(name)
    return logging.LoggerAdapter(logger, {"correlation_id": correlation_id or "N/A"})
