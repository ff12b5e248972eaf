"""
Pricing Fetcher - Logging Configuration

Two outputs share one record shape:
    console  -- colored one-liners, context fields appended as key=value
    JSON     -- one object per line (production console, and the log file)

Context travels in record.extra_data, attached by LoggerAdapter.
"""

import copy
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER = "pricing_fetcher"

CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _context(record: logging.LogRecord) -> Dict[str, Any]:
    return getattr(record, "extra_data", None) or {}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, timestamped when the record was created."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "thread": record.threadName,
            "source": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        data = _context(record)
        if data:
            entry["data"] = data
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Paths and datetimes in context are rendered with str()
        return json.dumps(entry, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Console formatter: level name colored by severity, context appended."""

    COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Other handlers see the same record
        record = copy.copy(record)
        color = self.COLORS.get(record.levelno)
        if color:
            record.levelname = f"{color}{record.levelname}{self.RESET}"

        line = super().format(record)
        data = _context(record)
        if data:
            line += " | " + " ".join(f"{key}={value}" for key, value in data.items())
        return line


def _console_handler(level: int, json_logs: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if json_logs:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(ColoredFormatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
    return handler


def _file_handler(log_file: str) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(
    log_level: str = "INFO",
    json_logs: bool = False,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure the pricing_fetcher logger.

    Replaces any handlers from an earlier call. The file, when given, always
    gets JSON at DEBUG level regardless of the console settings.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR
        json_logs: JSON on the console instead of colored text
        log_file: Optional path to a JSON log file

    Returns:
        Configured logger
    """
    level = getattr(logging, log_level.upper())

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.handlers.clear()

    logger.addHandler(_console_handler(level, json_logs))
    if log_file:
        logger.addHandler(_file_handler(log_file))

    return logger


class LoggerAdapter(logging.LoggerAdapter):
    """Adds fixed context to every record as extra_data."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.get("extra", {})
        data = dict(self.extra)
        data.update(extra.get("extra_data", {}))
        extra["extra_data"] = data
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str, **context) -> LoggerAdapter:
    """
    Get a logger with context.

    Args:
        name: Logger name under pricing_fetcher (e.g. "fetcher")
        **context: Extra fields attached to every record (url, directory, ...)
    """
    base_logger = logging.getLogger(f"{ROOT_LOGGER}.{name}")
    return LoggerAdapter(base_logger, context)


def log_fetch(
    logger: logging.Logger,
    url: str,
    status_code: Optional[int],
    size_bytes: Optional[int],
    duration_ms: float,
    **extra
):
    """Log a completed download."""
    logger.info(
        f"Fetched {url} -> {status_code}",
        extra={"extra_data": {
            "url": url,
            "status_code": status_code,
            "size_bytes": size_bytes,
            "duration_ms": duration_ms,
            **extra
        }}
    )


def log_error(
    logger: logging.Logger,
    error: Exception,
    context: str = "",
    **extra
):
    """Log an error with traceback."""
    logger.error(
        f"Error in {context}: {type(error).__name__}: {str(error)}",
        exc_info=error,
        extra={"extra_data": extra}
    )
