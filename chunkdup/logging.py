"""Logging configuration for chunkdup."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union, cast

from chunkdup.types import JsonDict

LOGGER_NAME = "chunkdup"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class StructuredLogger(logging.Logger):
    """Logger that supports structured logging with fields."""

    def _log_fields(self, level: int, msg: str, fields: JsonDict) -> None:
        if fields:
            msg = f"{msg} {fields}"
        # stacklevel 3 points the record at the caller of *_with_fields
        self.log(level, msg, extra={"extra_fields": fields}, stacklevel=3)

    def debug_with_fields(self, msg: str, **fields: Any) -> None:
        """Log a debug message with structured fields."""
        self._log_fields(logging.DEBUG, msg, fields)

    def info_with_fields(self, msg: str, **fields: Any) -> None:
        """Log a message with structured fields (at DEBUG level).

        Note: All structured logging is done at DEBUG level to keep the console clean.
        Use regular info() for user-facing messages.
        """
        self._log_fields(logging.DEBUG, msg, fields)

    def warning_with_fields(self, msg: str, **fields: Any) -> None:
        """Log a warning message with structured fields."""
        self._log_fields(logging.WARNING, msg, fields)

    def error_with_fields(self, msg: str, **fields: Any) -> None:
        """Log an error message with structured fields."""
        self._log_fields(logging.ERROR, msg, fields)


# Global logger instance
_logger_instance: Optional[StructuredLogger] = None


class JsonFormatter(logging.Formatter):
    """Custom formatter that outputs logs in JSON format."""

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        log_entry: JsonDict = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname and record.lineno:
            log_entry["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        # Structured fields from *_with_fields calls
        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_entry["fields"] = extra_fields

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def _stream_handler(verbose: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _file_handler(log_file: Union[str, Path], json_format: bool) -> logging.Handler:
    handler = logging.FileHandler(str(log_file))
    handler.setLevel(logging.DEBUG)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    return handler


def get_logger(verbose: bool = False) -> StructuredLogger:
    """Get or create the global logger instance.

    Args:
        verbose: Whether to enable debug logging on first configuration

    Returns:
        The configured logger instance
    """
    global _logger_instance
    if _logger_instance is None:
        logger = logging.getLogger(LOGGER_NAME)
        # Cast to StructuredLogger since we're changing its class
        logger.__class__ = StructuredLogger
        structured_logger = cast(StructuredLogger, logger)
        structured_logger.setLevel(logging.DEBUG)
        structured_logger.addHandler(_stream_handler(verbose))
        _logger_instance = structured_logger
    return _logger_instance


def setup_logging(
    log_file: Optional[Union[str, Path]] = None,
    verbose: bool = False,
    json_format: bool = False,
) -> StructuredLogger:
    """Set up logging configuration.

    Replaces any handlers installed earlier. Console output stays at INFO
    unless ``verbose`` is set; the optional log file receives everything.
    """
    logger = get_logger()

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_stream_handler(verbose))
    if log_file is not None:
        logger.addHandler(_file_handler(log_file, json_format))

    logger.setLevel(logging.DEBUG)
    return logger
