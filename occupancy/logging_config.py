"""
Logging setup shared by the occupancy API and the check_occupancy CLI.

Every line looks like:
    2026-01-06T14:05:52Z [source] LEVEL message

LOG_LEVEL picks the verbosity when the caller does not force one:
    INFO   run summaries (default)
    DEBUG  one line per repaired record and per fetched collection
    TRACE  raw update payloads sent to the store
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LEVELS_BY_NAME = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# The PocketBase SDK logs every request through these
QUIET_LOGGERS = ("httpx", "httpcore")


class ISO8601Formatter(logging.Formatter):
    """Prefix each record with a UTC timestamp and the emitting component."""

    def __init__(self, source: str = "app"):
        super().__init__()
        self.source = source

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        line = f"{stamp} [{self.source}] {record.levelname} {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for health checks unless the record is DEBUG."""

    HEALTH_PATHS = ("/health", "/api/health")

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == logging.DEBUG:
            return True
        message = record.getMessage()
        if "GET" not in message and "200" not in message:
            return True
        return not any(path in message for path in self.HEALTH_PATHS)


def level_from_env(default: int = logging.INFO) -> int:
    """Level named by LOG_LEVEL, or ``default`` when unset or unrecognised."""
    return LEVELS_BY_NAME.get(os.getenv("LOG_LEVEL", "").strip().upper(), default)


def configure_logging(source: str = "app", level: int | None = None) -> logging.Logger:
    """Send all logging to stdout in the shared format.

    Args:
        source: Component tag shown in brackets ("api", "check_occupancy")
        level: Forced level; when None, LOG_LEVEL decides

    Returns:
        The root logger
    """
    if level is None:
        level = level_from_env()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ISO8601Formatter(source=source))
    handler.addFilter(HealthCheckFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # uvicorn attaches its own handlers, which would skip HealthCheckFilter
    for name in UVICORN_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers[:] = [handler]
        server_logger.setLevel(level)
        server_logger.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
