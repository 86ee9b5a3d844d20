"""Structured logging configuration with request ID support."""

import json
import logging
import socket
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import TextIO

APP_NAME = "newsletter"

# Context variable to store the current request's ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Attributes present on every LogRecord; anything else came in via ``extra``.
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "request_id"}


class JsonFormatter(logging.Formatter):
    """Formats log records as bunyan-style JSON lines."""

    def __init__(self, name: str = APP_NAME):
        super().__init__()
        self.name = name
        self.hostname = socket.gethostname()

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, object] = {
            "name": self.name,
            "hostname": self.hostname,
            "pid": record.process,
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "target": record.name,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", "") or None,
        }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES and not key.startswith("_"):
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(log_entry, default=str)


class RequestIdFilter(logging.Filter):
    """Injects the current request's ID into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


def configure_logging(
    name: str = APP_NAME,
    log_level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """
    Set up structured JSON logging with request ID support.

    Idempotent: only adds the JSON handler once; subsequent calls only update
    the log level, leaving existing handlers (e.g. pytest's capture handler)
    intact.

    Args:
        name: Application name stamped on every record
        log_level: Logging level string (e.g. "INFO", "DEBUG", "WARNING")
        stream: Output stream, standard output when omitted
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level.upper())

    # Only install our handler if a JsonFormatter isn't already attached
    already_configured = any(
        isinstance(h.formatter, JsonFormatter)
        for h in root_logger.handlers
        if h.formatter is not None
    )
    if already_configured:
        return

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter(name))
    handler.addFilter(RequestIdFilter())
    root_logger.addHandler(handler)
