"""
Structured JSON logging for the fund report kernel.

Every record is one JSON line carrying the level, logger name and event
message, the ``extra`` fields of the call, and the fields of the
compilation currently bound in ``LogContext`` (correlation id,
organization, financial year). ``FundReportError`` subclasses have their
``code`` and structured attributes flattened into ``exc_*`` keys.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "CompilationFields",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, replace
from datetime import UTC, date, datetime
from typing import Any

# ---------------------------------------------------------------------------
# Compilation context
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompilationFields:
    """Fields identifying the compilation a log line belongs to."""

    correlation_id: str | None = None
    organization_id: str | None = None
    financial_year: str | None = None

    def present(self) -> dict[str, str]:
        return {k: v for k, v in asdict(self).items() if v is not None}


_EMPTY = CompilationFields()
_current: ContextVar[CompilationFields] = ContextVar("log_compilation", default=_EMPTY)


class LogContext:
    """Holds the compilation fields for the current thread or task."""

    @staticmethod
    def current() -> CompilationFields:
        return _current.get()

    @staticmethod
    def get_all() -> dict[str, str]:
        """Bound fields that have a value."""
        return _current.get().present()

    @staticmethod
    def clear() -> None:
        _current.set(_EMPTY)

    @staticmethod
    @contextmanager
    def bind(
        *,
        correlation_id: str | None = None,
        organization_id: str | None = None,
        financial_year: str | None = None,
    ) -> Iterator[CompilationFields]:
        """Overlay the given fields for the duration of the block."""
        updates = {
            "correlation_id": correlation_id,
            "organization_id": organization_id,
            "financial_year": financial_year,
        }
        fields = replace(
            _current.get(), **{k: v for k, v in updates.items() if v is not None}
        )
        token = _current.set(fields)
        try:
            yield fields
        finally:
            _current.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RESERVED: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (frozenset, set)):
        return sorted(obj)
    return str(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if name.startswith("_") or name == "code":
            continue
        fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record; Japanese text is written unescaped."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (k, v) for k, v in vars(record).items()
            if k not in _RESERVED and k not in payload
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_to_json, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_ROOT = "fund_kernel"
_setup_lock = threading.Lock()
_installed: logging.Handler | None = None


def get_logger(name: str) -> logging.Logger:
    """Logger named ``fund_kernel.<name>``."""
    return logging.getLogger(f"{_ROOT}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Install the JSON handler on the ``fund_kernel`` logger once."""
    global _installed
    with _setup_lock:
        if _installed is not None:
            return
        _installed = handler or logging.StreamHandler(stream or sys.stderr)
        _installed.setFormatter(StructuredFormatter())
        root = logging.getLogger(_ROOT)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(_installed)


def reset_logging() -> None:
    """Remove the installed handler so tests can configure again."""
    global _installed
    with _setup_lock:
        root = logging.getLogger(_ROOT)
        if _installed is not None:
            root.removeHandler(_installed)
            _installed = None
        root.handlers.clear()
        root.setLevel(logging.WARNING)
