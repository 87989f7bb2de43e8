"""
Structured JSON logging configuration.

Every log line is a single JSON object on stdout with a channel
(http, db, binding, checking), the current request ID and any business
context (uid, student_id, approval_id) attached by the caller.
"""

import logging
import json
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

from app.config import LOG_LEVEL

# Request ID of the HTTP request currently being handled.
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CHANNELS = ("http", "db", "binding", "checking")


class StructuredJsonFormatter(logging.Formatter):
    """
    Formatter producing one JSON object per record:
    timestamp, level, message, channel, context and extra.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": getattr(record, "channel", record.name.split(".")[-1] if "." in record.name else "app"),
            "context": {
                "request_id": request_id_var.get(""),
                **(getattr(record, "context", {}) or {})
            },
            "extra": getattr(record, "extra_data", {}) or {}
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging():
    """Install the JSON formatter on the root logger and set channel levels."""
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredJsonFormatter())

    level = getattr(logging, LOG_LEVEL, logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        logging.getLogger(f"app.{channel}").setLevel(level)

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    """Return the logger for one of the CHANNELS."""
    return logging.getLogger(f"app.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None,
                     exc_info=None):
    """
    Emit a structured log entry.

    Args:
        logger: The channel logger to use
        level: Log level string (INFO, WARNING, ERROR, DEBUG)
        message: Human-readable log message
        context: Business context (uid, student_id, approval_id)
        extra_data: Additional metadata (duration_ms, status_code)
        exc_info: Passed through to `Logger.log`
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.log(
        log_level,
        message,
        exc_info=exc_info,
        extra={"context": context or {}, "extra_data": extra_data or {}, "channel": logger.name.split(".")[-1]}
    )


def generate_request_id() -> str:
    """Generate a new UUID for request tracking."""
    return str(uuid.uuid4())
