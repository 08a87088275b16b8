"""
Logging formatters for the ShopWoo import service
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

# LogRecord attributes that are never copied into structured output
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "extra_fields"}


def _base_entry(record: logging.LogRecord) -> Dict[str, Any]:
    entry = {
        "timestamp": datetime.fromtimestamp(record.created).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    extra_fields = getattr(record, "extra_fields", None)
    if extra_fields:
        entry.update(extra_fields)
    return entry


class StructuredFormatter(logging.Formatter):
    """Single-line JSON with source location, used for the worker log"""

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None):
        super().__init__(fmt, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        log_entry = _base_entry(record)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        log_entry["module"] = record.module
        log_entry["function"] = record.funcName
        log_entry["line"] = record.lineno
        log_entry["process"] = record.process

        return json.dumps(log_entry, default=str)


class JSONFormatter(logging.Formatter):
    """JSON formatter for machine-readable logs"""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = _base_entry(record)
        log_entry.update(
            {
                "module": record.module,
                "function": record.funcName,
                "line": record.lineno,
            }
        )

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Fields passed through `extra=` by third-party callers
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in log_entry or key.startswith("_"):
                continue
            try:
                json.dumps(value)
            except (TypeError, ValueError):
                continue
            log_entry[key] = value

        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter with colors"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None):
        super().__init__(fmt, datefmt)

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        formatted = (
            f"{color}[{timestamp}] {record.levelname:8s} "
            f"{record.name}: {record.getMessage()}{reset}"
        )

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


class SimpleFormatter(logging.Formatter):
    """Plain text formatter without colors"""

    def __init__(self, fmt: Optional[str] = None, datefmt: Optional[str] = None):
        if fmt is None:
            fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        if datefmt is None:
            datefmt = "%Y-%m-%d %H:%M:%S"

        super().__init__(fmt, datefmt)


FORMATTERS = {
    "console": ConsoleFormatter,
    "json": JSONFormatter,
    "structured": StructuredFormatter,
    "simple": SimpleFormatter,
}


def build_formatter(formatter_type: str) -> logging.Formatter:
    """Instantiate the formatter registered under `formatter_type`"""
    return FORMATTERS.get(formatter_type, SimpleFormatter)()
