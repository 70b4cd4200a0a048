"""Tests for the shared log format and level selection.

Format: 2026-01-06T14:05:52Z [source] LEVEL message
"""

from __future__ import annotations

import io
import logging
import re
import sys

import pytest

from occupancy.logging_config import (
    TRACE,
    HealthCheckFilter,
    ISO8601Formatter,
    configure_logging,
    get_logger,
    level_from_env,
)
from occupancy.store import EntityType, PocketBaseEntityStore

TIMESTAMP = r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z"


def _line_pattern(source: str, level: str, message: str) -> str:
    return rf"^{TIMESTAMP} \[{re.escape(source)}\] {level} {re.escape(message)}$"


def _record(msg: str, level: int = logging.INFO, args: tuple = ()) -> logging.LogRecord:
    return logging.LogRecord(
        name="test", level=level, pathname="", lineno=0, msg=msg, args=args, exc_info=None
    )


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestISO8601Formatter:
    def test_line_format(self):
        output = ISO8601Formatter(source="check_occupancy").format(_record("3 beds repaired"))

        pattern = _line_pattern("check_occupancy", "INFO", "3 beds repaired")
        assert re.match(pattern, output), output

    def test_message_args_are_interpolated(self):
        output = ISO8601Formatter(source="api").format(_record("Bed %s cleared by %s", args=("B-12", "fix")))

        assert output.endswith("[api] INFO Bed B-12 cleared by fix")

    def test_trace_level_name(self):
        output = ISO8601Formatter(source="api").format(_record("payload", level=TRACE))

        assert "] TRACE payload" in output

    def test_exception_text_appended(self):
        try:
            raise ValueError("bad record")
        except ValueError:
            record = logging.LogRecord(
                name="test", level=logging.ERROR, pathname="", lineno=0, msg="failed", args=(),
                exc_info=sys.exc_info(),
            )

        output = ISO8601Formatter(source="api").format(record)

        assert "ERROR failed\n" in output
        assert "ValueError: bad record" in output


class TestHealthCheckFilter:
    @pytest.mark.parametrize("path", ["/health", "/api/health"])
    def test_health_access_logs_suppressed(self, path):
        record = _record(f'127.0.0.1:56948 - "GET {path} HTTP/1.1" 200 OK')

        assert HealthCheckFilter().filter(record) is False

    def test_other_paths_pass(self):
        record = _record('127.0.0.1:56948 - "GET /api/bed-diagnostics HTTP/1.1" 200 OK')

        assert HealthCheckFilter().filter(record) is True

    def test_health_passes_at_debug(self):
        record = _record('127.0.0.1:56948 - "GET /health HTTP/1.1" 200 OK', level=logging.DEBUG)

        assert HealthCheckFilter().filter(record) is True


class TestConfigureLogging:
    def test_defaults_to_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        assert configure_logging(source="test").level == logging.INFO

    def test_unrecognised_env_value_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "verbose")

        assert level_from_env() == logging.INFO
        assert configure_logging(source="test").level == logging.INFO

    @pytest.mark.parametrize(("env_value", "expected"), [("debug", logging.DEBUG), ("TRACE", TRACE)])
    def test_level_from_environment(self, monkeypatch, env_value, expected):
        monkeypatch.setenv("LOG_LEVEL", env_value)

        assert configure_logging(source="test").level == expected

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        assert configure_logging(source="test", level=logging.WARNING).level == logging.WARNING

    def test_uvicorn_loggers_share_root_handler(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        root = configure_logging(source="api")

        access = logging.getLogger("uvicorn.access")
        assert access.handlers == root.handlers
        assert access.propagate is False

    def test_single_handler_after_reconfigure(self):
        configure_logging(source="a")
        root = configure_logging(source="b")

        assert len(root.handlers) == 1

    def test_output_uses_source(self):
        configure_logging(source="check_occupancy")
        root = logging.getLogger()
        stream = io.StringIO()
        root.handlers[0].setStream(stream)  # type: ignore[attr-defined]

        get_logger("occupancy.diagnostics").info("Occupancy check: 4 beds")

        assert re.match(
            _line_pattern("check_occupancy", "INFO", "Occupancy check: 4 beds"),
            stream.getvalue().rstrip("\n"),
        )


class TestStoreTraceLogging:
    def test_update_payload_logged_at_trace(self, mock_pocketbase, caplog):
        store = PocketBaseEntityStore(mock_pocketbase)

        with caplog.at_level(TRACE, logger="occupancy.store"):
            store.update(EntityType.BED, "b1", {"technician_id": None})

        assert any(r.levelno == TRACE and "beds/b1" in r.getMessage() for r in caplog.records)


class TestLoggingModuleSurface:
    def test_trace_is_a_level_not_a_logger_method(self):
        assert logging.getLevelName(TRACE) == "TRACE"
        assert not hasattr(logging.Logger, "trace")

    def test_configure_logging_takes_no_debug_flag(self):
        with pytest.raises(TypeError):
            configure_logging(source="test", debug=True)  # type: ignore[call-arg]
