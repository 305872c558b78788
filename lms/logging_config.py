"""
Central logging configuration for the LMS progression service.

Provides:
- JSON records in production, a compact human-readable line in development
- Request correlation (request_id, set by RequestIdMiddleware)
- Student correlation (student_id, bound with bind_student around multi-step
  flows such as the daily login and progress resets)

Usage:
    from lms.logging_config import get_logger, bind_student
    logger = get_logger(__name__)
    with bind_student(student_id):
        logger.info("Awarded XP", extra={"amount": 50})
"""

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
student_id_var: ContextVar[Optional[int]] = ContextVar("student_id", default=None)

# LogRecord attributes that are never copied into the JSON payload
_RESERVED_ATTRS = frozenset(
    (
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "message", "taskName", "request_id", "student_id",
    )
)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context, if set."""
    return request_id_var.get()


@contextmanager
def bind_student(student_id: int) -> Iterator[None]:
    """Attach a student id to every record logged inside the block."""
    token = student_id_var.set(student_id)
    try:
        yield
    finally:
        student_id_var.reset(token)


class CorrelationFilter(logging.Filter):
    """Copy request/student correlation ids from context onto the record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"  # type: ignore[attr-defined]
        student_id = student_id_var.get()
        record.student_id = student_id if student_id is not None else "-"  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("request_id", "student_id"):
            value = getattr(record, key, None)
            if value is not None and value != "-":
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or value is None:
                continue
            try:
                json.dumps(value)
                payload[key] = value
            except (TypeError, ValueError):
                payload[key] = str(value)

        return json.dumps(payload)


# Factory in place at import time; configure_logging always wraps this one
_base_record_factory = logging.getLogRecordFactory()


def _record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
    """Records created before the filter runs (e.g. by third-party handlers) still format."""
    record = _base_record_factory(*args, **kwargs)
    for key in ("request_id", "student_id"):
        if not hasattr(record, key):
            setattr(record, key, "-")
    return record


def _create_dev_formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s student=%(student_id)s %(message)s",
        datefmt="%H:%M:%S",
    )


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Configure application-wide logging.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        environment: 'development' or 'production'
        debug: Force DEBUG regardless of log_level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    logging.setLogRecordFactory(_record_factory)

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(CorrelationFilter())
    handler.setFormatter(JsonFormatter() if environment == "production" else _create_dev_formatter())
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for the given module name.

    request_id and student_id are attached automatically when bound.
    """
    return logging.getLogger(name)
