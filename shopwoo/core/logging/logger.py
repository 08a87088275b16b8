"""
Main logging module for the ShopWoo import service
"""

import logging
from typing import Optional, Dict, Any

from shopwoo.core.config.settings import settings
from .config import LoggingConfig
from .handlers import FileHandler, ConsoleHandler

# Global logger cache
_loggers: Dict[str, logging.Logger] = {}


class StructuredLogger:
    """Wrapper around the standard logger that accepts structured keyword arguments.

    Keyword arguments are rendered as ``key=value`` pairs on the message and
    also attached to the record as ``extra_fields`` for the JSON formatters.
    ``bind()`` returns a logger that adds fixed context to every line.
    """

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        self._logger = logger
        self._context = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **context) -> "StructuredLogger":
        """Return a logger carrying `context` on every line"""
        merged = dict(self._context)
        merged.update(context)
        return StructuredLogger(self._logger, merged)

    def _format_message(self, message: str, fields: Dict[str, Any]) -> str:
        """Format message with structured data as key=value pairs"""
        structured_parts = []
        for key, value in fields.items():
            if value is None:
                continue
            if isinstance(value, str) and " " in value:
                structured_parts.append(f'{key}="{value}"')
            else:
                structured_parts.append(f"{key}={value}")

        if structured_parts:
            return f"{message} | {' | '.join(structured_parts)}"
        return message

    def _emit(self, level: int, message: str, exc_info: bool = False, **kwargs):
        if not self._logger.isEnabledFor(level):
            return
        fields = dict(self._context)
        fields.update(kwargs)
        self._logger.log(
            level,
            self._format_message(message, fields),
            exc_info=exc_info,
            extra={"extra_fields": {k: v for k, v in fields.items() if v is not None}},
            stacklevel=3,
        )

    def debug(self, message: str, **kwargs):
        self._emit(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._emit(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._emit(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._emit(logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs):
        self._emit(logging.CRITICAL, message, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log at ERROR with the active exception's traceback"""
        self._emit(logging.ERROR, message, exc_info=True, **kwargs)

    def log(self, level: int, message: str, **kwargs):
        self._emit(level, message, **kwargs)


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """Setup logging configuration for the application"""
    if config is None:
        config = LoggingConfig()

    level = getattr(logging, config.level.upper())

    # Clear existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(level)

    if config.file.enabled:
        if config.file.app_log_enabled:
            root_logger.addHandler(
                FileHandler.create_app_handler(
                    log_dir=config.file.log_dir,
                    max_bytes=config.file.max_file_size,
                    backup_count=config.file.backup_count,
                    level=level,
                    formatter_type=config.format,
                )
            )

        if config.file.error_log_enabled:
            root_logger.addHandler(
                FileHandler.create_error_handler(
                    log_dir=config.file.log_dir,
                    max_bytes=config.file.max_file_size,
                    backup_count=config.file.backup_count,
                    formatter_type=config.format,
                )
            )

        if config.file.worker_log_enabled:
            root_logger.addHandler(
                FileHandler.create_worker_handler(
                    log_dir=config.file.log_dir,
                    max_bytes=config.file.max_file_size,
                    backup_count=config.file.backup_count,
                    level=level,
                )
            )

    if config.console.enabled:
        root_logger.addHandler(
            ConsoleHandler.create_handler(
                level=getattr(logging, config.console.level.upper()),
                formatter_type=config.format,
            )
        )

    # Quiet noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.info("Logging system initialized")


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance"""
    if name not in _loggers:
        _loggers[name] = logging.getLogger(name)

    return StructuredLogger(_loggers[name])


def set_log_level(name: str, level: str) -> None:
    """Set log level for a specific logger"""
    if name not in _loggers:
        _loggers[name] = logging.getLogger(name)
    _loggers[name].setLevel(getattr(logging, level.upper()))


# Initialize logging on module import
try:
    logging_config = LoggingConfig(
        level=settings.logging.LOG_LEVEL,
        format=settings.logging.LOG_FORMAT,
        file=settings.logging.LOGGING["file"],
        console=settings.logging.LOGGING["console"],
    )

    setup_logging(logging_config)

except Exception as e:
    # Fallback to basic logging if setup fails
    print(f"Failed to setup logging: {e}")
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
