"""
JSON logging for the course registry.

Entries are grouped in channels: http (request timing and listing
summaries), db (course, student and role writes), authz (refused policy
checks, with the identity, table and operation) and provisioning
(profile and default role creation on signup). Every entry carries the
request id of the HTTP request that produced it.
"""

import logging
import json
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

from registry.config import LOG_LEVEL

# ──────────────────────────────────────────────────────────────
# Context variable to track request ID across async operations.
# Each incoming HTTP request gets a unique UUID, which is then
# attached to every log entry produced during that request.
# ──────────────────────────────────────────────────────────────
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CHANNELS = ["http", "db", "authz", "provisioning"]


class StructuredJsonFormatter(logging.Formatter):
    """
    Logging formatter that outputs one JSON object per line:

    - timestamp: ISO 8601 timestamp in UTC
    - level: Log severity (INFO, WARNING, ERROR, DEBUG)
    - message: Human-readable log message
    - channel: Log source category (http, db, authz, provisioning, app)
    - context: Business context (request_id, identity_id, course_id, ...)
    - extra: Additional metadata (ip, duration_ms, ...)
    """

    def format(self, record: logging.LogRecord) -> str:
        context = {"request_id": request_id_var.get("")}
        context.update(getattr(record, "context", {}) or {})

        log_entry = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": getattr(record, "channel", record.name.split(".")[-1] if "." in record.name else "app"),
            "context": context,
            "extra": getattr(record, "extra_data", {}) or {}
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging():
    """
    Configure the root logger and all channel-specific loggers.

    Output goes to stdout through a single handler; channel loggers
    propagate to it so entries can be filtered by channel.
    """
    formatter = StructuredJsonFormatter()

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    level = getattr(logging, LOG_LEVEL, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for channel in CHANNELS:
        logging.getLogger(f"registry.{channel}").setLevel(level)

    return root_logger


def get_logger(channel: str) -> logging.Logger:
    """
    Get a channel-specific logger.

    Args:
        channel: Log channel name (http, db, authz, provisioning)
    """
    return logging.getLogger(f"registry.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None):
    """
    Emit a structured log entry with business context and extra metadata.

    This is the primary logging function used throughout the application.

    Args:
        logger: The channel logger to use
        level: Log level string (INFO, WARNING, ERROR, DEBUG)
        message: Human-readable log message
        context: Business context dict (course_id, student_id, identity_id)
        extra_data: Additional metadata dict (ip, duration_ms, query_params)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.log(
        log_level,
        message,
        extra={"context": context or {}, "extra_data": extra_data or {}, "channel": logger.name.split(".")[-1]}
    )


def generate_request_id() -> str:
    """Generate a new UUID for request tracking."""
    return str(uuid.uuid4())
