"""
Structured JSON logging for the service.

Every record becomes one JSON line on stdout carrying the channel
(http, db, students, import), the current request id and any business
context passed through `log_with_context`.
"""

import json
import logging
import os
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

# Set by the request-ID middleware; empty outside a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOGGER_PREFIX = "students_api"


class StructuredJsonFormatter(logging.Formatter):
    """Render a record as {timestamp, level, channel, message, context, extra}."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, timezone.utc)
        entry = {
            "timestamp": stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "channel": getattr(record, "channel", record.name.rsplit(".", 1)[-1]),
            "message": record.getMessage(),
            "context": {"request_id": request_id_var.get(), **getattr(record, "context", {})},
            "extra": getattr(record, "extra_data", {}),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging():
    """Send all records to stdout through the JSON formatter."""
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredJsonFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    root_logger.handlers = [handler]
    return root_logger


def get_logger(channel: str) -> logging.Logger:
    return logging.getLogger(f"{LOGGER_PREFIX}.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None,
                     exc_info=None):
    """
    Log `message` at `level` with business context (student_id, ...) and
    metadata (duration_ms, error, ...); `exc_info` adds a traceback.
    """
    logger.log(
        getattr(logging, level.upper(), logging.INFO),
        message,
        exc_info=exc_info,
        extra={
            "context": context or {},
            "extra_data": extra_data or {},
            "channel": logger.name.rsplit(".", 1)[-1],
        },
    )


def generate_request_id() -> str:
    return str(uuid.uuid4())
