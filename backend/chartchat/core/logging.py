"""
Structured logging configuration.

Provides JSON logging for production and readable text format for development.
"""
import sys
import logging
import json
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from chartchat.core.config import Settings, get_settings

# Attributes every LogRecord carries; anything else was passed via ``extra``.
_RESERVED_ATTRS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'thread', 'threadName',
    'exc_info', 'exc_text', 'message', 'correlation_id', 'taskName',
))

# Set per request by CorrelationIDMiddleware.
correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="system")


class CorrelationIdFilter(logging.Filter):
    """Stamp the current correlation id onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """
    Structured JSON log formatter for production.

    Outputs one JSON object per line with timestamp, level, message,
    logger name, correlation id and any ``extra`` fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
            "correlation_id": getattr(record, "correlation_id", "system"),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Readable text formatter for development."""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, 'correlation_id'):
            record.correlation_id = 'system'
        return super().format(record)


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure application logging from settings.

    ``log_format`` selects the formatter:
    - 'json': Structured JSON logging (recommended for production)
    - 'text': Human-readable format (default for development)
    """
    settings = settings or get_settings()

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level, logging.INFO))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(CorrelationIdFilter())
    if settings.log_format == 'json':
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)

    if settings.log_format == 'json':
        root_logger.info("Structured JSON logging enabled")
