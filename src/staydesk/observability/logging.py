"""Structured JSON logging with request correlation.

Every line carries the service name and, inside a request, its correlation
id. Call sites attach structured context with
``extra={"extra_fields": {...}}``.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from staydesk.infra.settings import get_settings

from .correlation import get_correlation_id

# All staydesk.* loggers propagate to this one.
ROOT_LOGGER_NAME = "staydesk"


class JsonFormatter(logging.Formatter):
    """JSON formatter that includes service name and correlation ID."""

    def __init__(self, service: str = "staydesk") -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": self.service,
            "message": record.getMessage(),
        }

        correlation_id = get_correlation_id()
        if correlation_id:
            log_obj["correlationId"] = correlation_id

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_obj.update(record.extra_fields)

        return json.dumps(log_obj, default=str)


def configure_logging() -> logging.Logger:
    """Attach the JSON handler to the package root logger (idempotent).

    Domain modules log through logging.getLogger(__name__) and propagate here.
    """
    settings = get_settings()
    root = logging.getLogger(ROOT_LOGGER_NAME)

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter(service=settings.service_name))
        root.addHandler(handler)
        root.propagate = False

    root.setLevel(settings.log_level)
    return root


def get_logger(name: str) -> logging.Logger:
    """Get a logger that writes JSON through the package root handler."""
    configure_logging()
    return logging.getLogger(name)
