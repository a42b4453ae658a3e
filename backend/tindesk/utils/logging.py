# backend/tindesk/utils/logging.py
"""
Root logger setup for the API and the CLI.

One stream handler (stdout unless told otherwise), text or JSON (LOG_FORMAT),
every record stamped with the current correlation ID so the lines of one
valuation run can be pulled out together.

Levels used by the valuation engine:
    DEBUG   - classification counts, reversal lookups
    INFO    - run started, record persisted
    WARNING - duplicate runs, missing curve data, bad input
    ERROR   - storage failures
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from tindesk.config import settings
from tindesk.utils.context import get_correlation_id

TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(correlation_id)s] %(name)s: %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NO_CORRELATION_ID = "-"

# Chatty at INFO; kept at WARNING unless asked otherwise
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "uvicorn.access", "httpx", "httpcore")

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Present on every LogRecord; anything else arrived through extra=
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "correlation_id", "asctime"}


class CorrelationIdFilter(logging.Filter):
    """Sets record.correlation_id (a placeholder outside a request or run)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


def _json_safe(value: Any) -> Any:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    """One JSON object per line; extra= fields are nested under "extra"."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "correlation_id": getattr(record, "correlation_id", NO_CORRELATION_ID),
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: _json_safe(value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        }
        if extra:
            entry["extra"] = extra
        return json.dumps(entry)


def _get_log_level(name: str) -> int:
    """Level number for a name such as "info" or " WARNING "."""
    try:
        return LOG_LEVELS[name.strip().upper()]
    except KeyError:
        raise ValueError(
            f"Invalid log level: {name!r} (expected one of {', '.join(LOG_LEVELS)})"
        ) from None


def setup_logging(
        level: str | None = None,
        log_format: str | None = None,
        stream: TextIO | None = None,
) -> None:
    """
    Replace the root logger's handlers with one configured stream handler.

    Args:
        level: Level name (default: settings.log_level)
        log_format: "text" or "json" (default: settings.log_format)
        stream: Where records go (default: stdout). The CLI passes stderr so
            stdout carries only its JSON result.

    Raises:
        ValueError: unknown level name
    """
    level_name = level or settings.log_level
    format_type = (log_format or settings.log_format).lower()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    if format_type == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATE_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_get_log_level(level_name))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(f"Logging configured: level={level_name}, format={format_type}")
