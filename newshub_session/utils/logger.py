"""Structured logging setup.

Loggers returned by :func:`get_logger` accept keyword fields in the call
(``logger.info("Login succeeded", user_id=user.id)``). Fields are rendered as
``key=value`` pairs in text mode and as top-level keys in JSON mode.
"""

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional, Tuple

from rich.logging import RichHandler
from rich.markup import escape

ROOT_LOGGER_NAME = "newshub_session"

_RESERVED_KWARGS = {"exc_info", "stack_info", "stacklevel", "extra"}


class StructuredLogger(logging.LoggerAdapter):
    """Logger adapter that turns keyword arguments into structured fields"""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        fields = {k: kwargs.pop(k) for k in list(kwargs) if k not in _RESERVED_KWARGS}
        extra = dict(kwargs.get("extra") or {})
        extra["fields"] = fields
        kwargs["extra"] = extra
        return msg, kwargs


def _format_fields(fields: Dict[str, Any]) -> str:
    return " ".join(f"{k}={v}" for k, v in fields.items())


class TextFormatter(logging.Formatter):
    """Plain text formatter appending key=value fields"""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        fields = getattr(record, "fields", None)
        if fields:
            return f"{base} {_format_fields(fields)}"
        return base


class JSONFormatter(logging.Formatter):
    """One JSON object per line"""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        payload.update(getattr(record, "fields", None) or {})
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class _RichFieldsFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        msg = escape(record.getMessage())
        fields = getattr(record, "fields", None)
        if fields:
            msg = f"{msg} [dim]{escape(_format_fields(fields))}[/dim]"
        return msg


def setup_logger(
    log_level: str = "INFO",
    log_format: str = "text",
    file_path: Optional[str] = None,
    max_bytes: int = 10485760,
    backup_count: int = 5,
    console: bool = True,
) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        log_level: Level name (DEBUG, INFO, ...)
        log_format: "json" or "text" (file output only; console is always rich)
        file_path: Rotating log file, or None to disable file logging
        max_bytes: Rotation size
        backup_count: Number of rotated files kept
        console: Attach a rich console handler
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console:
        rich_handler = RichHandler(markup=True, rich_tracebacks=True, show_path=False)
        rich_handler.setFormatter(_RichFieldsFormatter())
        logger.addHandler(rich_handler)

    if file_path:
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        if log_format == "json":
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                TextFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
            )
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module"""
    return StructuredLogger(logging.getLogger(name), {})
