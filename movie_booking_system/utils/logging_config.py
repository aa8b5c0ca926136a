"""
Logging configuration for the Movie Booking System.

Everything goes through the standard ``logging`` module, configured once
at startup with ``dictConfig``. Records carry the id of the HTTP request
that produced them and are scrubbed of session tokens, passwords and
patron email addresses before any handler sees them.
"""

import json
import logging
import logging.config
import re
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# Set per request by LoggingMiddleware.
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")

MASK = "***"

# Attributes every LogRecord has; anything else was passed through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "request_id"}


def _handler(handler_class: str, level: str, formatter: str, **options) -> Dict[str, Any]:
    return {
        "class": handler_class,
        "level": level,
        "formatter": formatter,
        "filters": ["request_context", "redact"],
        **options,
    }


def build_logging_config(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_json_logging: bool = False,
) -> Dict[str, Any]:
    """Build the ``dictConfig`` mapping used by ``setup_logging``."""
    formatter = "json" if enable_json_logging else "console"
    handlers = {"console": _handler("logging.StreamHandler", log_level, formatter, stream=sys.stdout)}
    if log_file:
        handlers["file"] = _handler(
            "logging.handlers.RotatingFileHandler",
            log_level,
            formatter,
            filename=log_file,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
        )
    names = list(handlers)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "%(asctime)s %(levelname)-7s [%(request_id)s] %(name)s: %(message)s",
                "datefmt": "%H:%M:%S",
            },
            "json": {"()": JSONFormatter},
        },
        "filters": {
            "request_context": {"()": RequestContextFilter},
            "redact": {"()": RedactingFilter},
        },
        "handlers": handlers,
        "loggers": {
            "movie_booking_system": {"level": log_level, "handlers": names, "propagate": False},
            "uvicorn": {"level": "INFO", "handlers": names, "propagate": False},
            # httpx logs every backend call at INFO; the client logs failures itself.
            "httpx": {"level": "WARNING", "handlers": names, "propagate": False},
        },
        "root": {"level": "WARNING", "handlers": names},
    }


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_json_logging: bool = False
) -> None:
    """
    Configure logging for the service.

    Args:
        log_level: Level for the service's own loggers
        log_file: Optional path of a rotating log file
        enable_json_logging: Emit one JSON object per record
    """
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_level, log_file, enable_json_logging))


class RequestContextFilter(logging.Filter):
    """Stamp records with the current request id."""

    def filter(self, record):
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get()
        return True


class RedactingFilter(logging.Filter):
    """Mask credentials and patron emails in messages and extra fields."""

    SECRET_FIELDS = ("password", "token", "secret", "authorization", "cookie")
    BEARER = re.compile(r"(Bearer\s+)\S+", re.IGNORECASE)
    JWT = re.compile(r"\beyJ[\w-]+\.[\w-]+\.[\w-]+")
    EMAIL = re.compile(r"[\w.+-]+@[\w-]+(\.[\w-]+)+")

    def filter(self, record):
        if isinstance(record.msg, str):
            record.msg = self.redact_text(record.msg)
        for key, value in list(vars(record).items()):
            if key in _RECORD_ATTRS:
                continue
            if self._is_secret(key):
                setattr(record, key, MASK)
            elif isinstance(value, (str, dict, list)):
                setattr(record, key, self.redact(value))
        return True

    def _is_secret(self, key: str) -> bool:
        return any(word in key.lower() for word in self.SECRET_FIELDS)

    def redact_text(self, text: str) -> str:
        text = self.BEARER.sub(rf"\1{MASK}", text)
        text = self.JWT.sub(MASK, text)
        return self.EMAIL.sub("<email>", text)

    def redact(self, value):
        if isinstance(value, dict):
            return {k: MASK if self._is_secret(str(k)) else self.redact(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self.redact(item) for item in value]
        if isinstance(value, str):
            return self.redact_text(value)
        return value


class JSONFormatter(logging.Formatter):
    """One JSON object per record, extra fields inlined."""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", None),
            "message": record.getMessage(),
        }
        entry.update({k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def log_business_event(event_type: str, details: Dict[str, Any], user_id: Optional[str] = None):
    """Record a booking flow or catalog event on the ``events`` logger."""
    logging.getLogger("movie_booking_system.events").info(
        event_type,
        extra={"event_type": event_type, "user_id": user_id, **details},
    )
