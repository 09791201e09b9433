"""
app/core/logging.py

Purpose: Logging configuration

- JSON lines in production, colored one-liners in development
- Per-task log context (request_id, user_id, telegram_user_id, table, state)
- Email addresses masked in log context
"""

import logging
import sys
import json
from contextvars import ContextVar
from datetime import datetime
from typing import Any, Dict

from app.core.config import settings

LOGGER_PREFIX = "livabhi"

# Record attributes copied into log output when present
CONTEXT_FIELDS = ("request_id", "user_id", "telegram_user_id", "table", "state", "email")

NOISY_LOGGERS = ("httpx", "httpcore", "motor", "pymongo", "uvicorn.access", "multipart")

# Context of the running task; asyncio copies it into every task it starts
_log_context: ContextVar[Dict[str, Any]] = ContextVar("livabhi_log_context", default={})

_base_record_factory = logging.getLogRecordFactory()


def _context_record_factory(*args, **kwargs) -> logging.LogRecord:
    record = _base_record_factory(*args, **kwargs)
    for key, value in _log_context.get().items():
        setattr(record, key, value)
    return record


logging.setLogRecordFactory(_context_record_factory)


def mask_email(value: Any) -> str:
    """asha.rao@example.com -> as***@example.com"""
    text = str(value)
    local, sep, domain = text.partition("@")
    if not sep:
        return text
    return f"{local[:2]}***@{domain}"


def _context_of(record: logging.LogRecord) -> Dict[str, Any]:
    context = {}
    for field in CONTEXT_FIELDS:
        if hasattr(record, field):
            value = getattr(record, field)
            context[field] = mask_email(value) if field == "email" else value
    return context


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line, for the production log pipeline.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        log_data.update(_context_of(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        name = record.name.replace(f"{LOGGER_PREFIX}.", "", 1)

        message = f"{color}[{timestamp}] {record.levelname:<8}{self.RESET} {name}: {record.getMessage()}"

        context = _context_of(record)
        if context:
            message += " [" + ", ".join(f"{k}={v}" for k, v in context.items()) + "]"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


def setup_logging() -> logging.Logger:
    """
    Installs a single stdout handler on the root logger.
    Safe to call more than once.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter() if settings.is_production else DevelopmentFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(LOGGER_PREFIX)
    logger.info(f"Logging configured ({settings.ENVIRONMENT}, level {settings.LOG_LEVEL})")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Logger under the application namespace, e.g. get_logger(__name__)
    gives "livabhi.app.services.otp_service".
    """
    return logging.getLogger(f"{LOGGER_PREFIX}.{name}")


def current_context() -> Dict[str, Any]:
    return dict(_log_context.get())


class LogContext:
    """
    Attaches fields to every record logged inside the block, including
    records from awaited coroutines. Nested blocks merge their fields.

    Usage:
        with LogContext(telegram_user_id=123, state="AWAITING_PRICE"):
            logger.info("Processing price input")
    """

    def __init__(self, **kwargs):
        self.context = kwargs
        self._token = None

    def __enter__(self):
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _log_context.reset(self._token)
