"""
Structured logging.

Each module logs through a named StructuredLogger; keyword arguments become
`key=value` fields on the line, and `bind()` pins fields (resource, report,
team member...) onto every line a child logger emits.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any, Iterator, Optional, TextIO

from app.core.config import Settings, settings

# Attributes every LogRecord carries; anything else on a record is a field.
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "timestamp",
}

NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class StructuredLogger:
    """Named logger whose keyword arguments become structured fields."""

    def __init__(self, name: str, **context: Any):
        self.logger = logging.getLogger(name)
        self.context = context

    def bind(self, **fields: Any) -> "StructuredLogger":
        """Child logger that adds `fields` to every line."""
        return StructuredLogger(self.logger.name, **{**self.context, **fields})

    def _log(self, level: int, message: str, exc: Optional[BaseException], fields: dict) -> None:
        if not self.logger.isEnabledFor(level):
            return
        extra = {**self.context, **fields}
        self.logger.log(level, message, exc_info=exc, extra=extra)

    def debug(self, message: str, **fields: Any):
        self._log(logging.DEBUG, message, None, fields)

    def info(self, message: str, **fields: Any):
        self._log(logging.INFO, message, None, fields)

    def warning(self, message: str, **fields: Any):
        self._log(logging.WARNING, message, None, fields)

    def error(self, message: str, exc: Optional[BaseException] = None, **fields: Any):
        self._log(logging.ERROR, message, exc, fields)


def _render(value: Any) -> str:
    text = str(value)
    if not text or any(ch.isspace() for ch in text):
        return repr(text)
    return text


class StructuredFormatter(logging.Formatter):
    """`[ts] LEVEL name: message | key=value | ...` plus the traceback, if any."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = self.formatTime(record, self.default_time_format)
        line = f"[{timestamp}] {record.levelname} {record.name}: {record.getMessage()}"

        fields = [
            f"{key}={_render(value)}"
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        ]
        if fields:
            line = f"{line} | {' | '.join(fields)}"

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(
    level: str = "INFO",
    *,
    log_file: Optional[str] = None,
    stream: TextIO = sys.stdout,
) -> None:
    """
    Route the root logger to `stream` (and `log_file` when given).

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path of an additional log file
        stream: Console stream
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    root_logger.setLevel(numeric_level)

    formatter = StructuredFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(stream)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(name)


app_logger = get_logger("app")
api_logger = get_logger("api")
square_logger = get_logger("square")
metrics_logger = get_logger("metrics")


@contextmanager
def timed(logger: StructuredLogger, message: str, **fields: Any) -> Iterator[dict]:
    """
    Log `message` at debug level with the elapsed `duration_ms` once the block exits.

    The yielded dict can be filled with fields only known inside the block
    (a response status, a record count).
    """
    outcome: dict = {}
    started = time.perf_counter()
    try:
        yield outcome
    finally:
        elapsed = round((time.perf_counter() - started) * 1000, 1)
        logger.debug(message, **{**fields, **outcome, "duration_ms": elapsed})


def init_app_logging(cfg: Optional[Settings] = None) -> None:
    """Configure logging from settings."""
    cfg = cfg or settings
    log_file = cfg.LOG_FILE_PATH if cfg.LOG_TO_FILE else None
    configure_logging(cfg.LOG_LEVEL, log_file=log_file)
    app_logger.info("Application logging initialized", level=cfg.LOG_LEVEL, log_file=log_file)
