"""Structured JSON logging shared by the catalog API, importer, and CLI.

Every record goes through one ``ebook_catalog`` logger. Request-scoped fields
(the correlation id, mostly) live in a context variable and are copied onto
each record by :class:`LogContextFilter`, so call sites only pass what is
specific to the event via ``extra``.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional

LOGGER_NAME = "ebook_catalog"
DEFAULT_LOG_LEVEL = logging.INFO

PACKAGE_DIR = Path(__file__).resolve().parent
LOG_DIR = Path(os.environ.get("EBOOK_CATALOG_LOG_DIR") or PACKAGE_DIR.parent / "log")
LOG_FILE = LOG_DIR / "app.log"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Fields promoted to the top level of each JSON line when present.
PROMOTED_FIELDS: tuple[str, ...] = ("correlation_id", "event", "path", "status", "duration_ms")

# Attributes every LogRecord carries; anything else arrived through ``extra``
# or the log context.
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord(LOGGER_NAME, logging.INFO, __file__, 0, "", (), None))
) | {"message", "asctime", "taskName", "console_suppress"}

_logger: Optional[logging.Logger] = None
_log_context: contextvars.ContextVar[Mapping[str, object]] = contextvars.ContextVar(
    "ebook_catalog_log_context", default={}
)


class JSONLogFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    DEFAULT_FIELDS = PROMOTED_FIELDS

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pid": record.process,
            "thread": record.threadName,
        }
        payload.update(
            (name, getattr(record, name))
            for name in self.DEFAULT_FIELDS
            if getattr(record, name, None) is not None
        )

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRIBUTES and key not in self.DEFAULT_FIELDS
        }
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class LogContextFilter(logging.Filter):
    """Copy the active log context onto every record passing through."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        for key, value in _log_context.get().items():
            setattr(record, key, value)
        return True


def _file_logging_enabled() -> bool:
    flag = os.environ.get("EBOOK_CATALOG_LOG_TO_FILE", "1").strip().lower()
    return flag not in {"0", "false", "no", "off"}


def _build_handlers() -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if _file_logging_enabled():
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(LOG_FILE, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS)
        )
    formatter = JSONLogFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(log_level: int = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Create the application logger on first use; later calls only adjust the level."""

    global _logger
    if _logger is None:
        logger = logging.getLogger(LOGGER_NAME)
        logger.propagate = False
        logger.addFilter(LogContextFilter())
        for handler in _build_handlers():
            logger.addHandler(handler)
        _logger = logger
    configure_logging_level(log_level=log_level)
    return _logger


def get_logger() -> logging.Logger:
    """Return the application logger, creating it if needed."""

    return _logger if _logger is not None else setup_logging()


def _resolve_level(log_level: int | str | None) -> Optional[int]:
    if isinstance(log_level, str):
        resolved = logging.getLevelName(log_level.strip().upper())
        return resolved if isinstance(resolved, int) else None
    return log_level


def configure_logging_level(debug_enabled: bool = False, log_level: int | str | None = None) -> int:
    """Set the level on the logger and its handlers.

    An explicit ``log_level`` (number or level name) wins over
    ``debug_enabled``. Unknown level names fall back to the default.
    """

    level = _resolve_level(log_level)
    if level is None:
        level = logging.DEBUG if debug_enabled else DEFAULT_LOG_LEVEL
    logger = get_logger()
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
    return level


def get_log_context() -> Dict[str, object]:
    return dict(_log_context.get())


def push_log_context(**values: object) -> contextvars.Token:
    """Merge non-``None`` ``values`` into the log context and return a reset token."""

    merged = {**_log_context.get(), **{key: value for key, value in values.items() if value is not None}}
    return _log_context.set(merged)


def pop_log_context(token: contextvars.Token) -> None:
    _log_context.reset(token)


@contextlib.contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Scope ``values`` to the enclosed block."""

    token = push_log_context(**values)
    try:
        yield
    finally:
        pop_log_context(token)


def clear_log_context() -> None:
    _log_context.set({})


@contextlib.contextmanager
def timed_event(
    event: str,
    message: str,
    *,
    logger_obj: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
    **fields: object,
) -> Iterator[Dict[str, object]]:
    """Log ``message`` with ``duration_ms`` once the block finishes.

    The yielded dict is merged into the record, so the block can attach
    values it only learns while running (counts, totals).
    """

    details: Dict[str, object] = dict(fields)
    started = time.perf_counter()
    try:
        yield details
    finally:
        elapsed = round((time.perf_counter() - started) * 1000, 3)
        (logger_obj or get_logger()).log(
            level, message, extra={**details, "event": event, "duration_ms": elapsed}
        )


def _echo(level: int, message: str, args: tuple[object, ...], logger_obj: Optional[logging.Logger]) -> None:
    (logger_obj or get_logger()).log(level, message, *args, extra={"console_suppress": True})
    print(message % args if args else message)


def console_info(message: str, *args: object, logger_obj: Optional[logging.Logger] = None) -> None:
    """Log at INFO and print the rendered message for CLI users."""

    _echo(logging.INFO, message, args, logger_obj)


def console_warning(message: str, *args: object, logger_obj: Optional[logging.Logger] = None) -> None:
    _echo(logging.WARNING, message, args, logger_obj)


def console_error(message: str, *args: object, logger_obj: Optional[logging.Logger] = None) -> None:
    _echo(logging.ERROR, message, args, logger_obj)


logger = get_logger()
