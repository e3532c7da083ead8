"""
Pytest fixtures shared by the fund report test suite.

Provides:
- Structured logging configured once per session
- LogContext isolation between tests
- ``captured_logs`` for asserting on emitted log events
"""

import json
import logging
from io import StringIO

import pytest

from fund_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


@pytest.fixture(scope="session", autouse=True)
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture fund_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            service.compile("org-1", 2024)
            logs = captured_logs()
            assert any(r["message"] == "report_compilation_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("fund_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)
