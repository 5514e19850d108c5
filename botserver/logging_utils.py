"""Structured JSON logging."""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from botserver.config import config

# Extra record attributes copied into the JSON line when present.
EXTRA_FIELDS = (
    "request_id",
    "method",
    "path",
    "status",
    "latency_ms",
    "events",
    "key",
    "cert",
    "days",
    "self_signed",
    "port",
)


class StructuredJsonFormatter(logging.Formatter):
    """Formatter that outputs structured JSON logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        return json.dumps(log_data, default=str)


def setup_logging() -> logging.Logger:
    """Configure structured JSON logging."""
    logger = logging.getLogger("botserver")
    logger.setLevel(config.LOG_LEVEL)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(StructuredJsonFormatter())
        logger.addHandler(handler)

    return logger


logger = setup_logging()


def _emit(level: int, message: str, **extra: Any) -> None:
    record = logger.makeRecord(logger.name, level, "", 0, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    logger.handle(record)


def log_request(
    method: str,
    path: str,
    status: int,
    latency_ms: float,
    request_id: Optional[str] = None,
    **extra: Any,
) -> None:
    """Log HTTP request with structured data."""
    if request_id is None:
        request_id = str(uuid.uuid4())

    _emit(
        logging.INFO,
        f"{method} {path}",
        request_id=request_id,
        method=method,
        path=path,
        status=status,
        latency_ms=int(latency_ms),
        **extra,
    )


def log_event(message: str, **extra: Any) -> None:
    """Log a lifecycle event with structured data."""
    _emit(logging.INFO, message, **extra)


def log_error(
    message: str, request_id: Optional[str] = None, **extra: Any
) -> None:
    """Log error with structured data."""
    if request_id is not None:
        extra["request_id"] = request_id
    _emit(logging.ERROR, message, **extra)
