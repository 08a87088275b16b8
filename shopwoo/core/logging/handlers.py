"""
Logging handlers for the ShopWoo import service
"""

import os
import logging
import logging.handlers

from .formatters import build_formatter


class FileHandler:
    """Rotating file handler factory for the service's log files"""

    APP_LOG = "app.log"
    ERROR_LOG = "errors.log"
    WORKER_LOG = "worker.log"

    # Loggers whose records go to worker.log
    WORKER_LOGGER_PREFIXES = ("shopwoo.domains.importer", "shopwoo.domains.shopify")

    @staticmethod
    def _rotating(
        log_dir: str,
        filename: str,
        max_bytes: int,
        backup_count: int,
        level: int,
        formatter_type: str,
    ) -> logging.handlers.RotatingFileHandler:
        os.makedirs(log_dir, exist_ok=True)

        handler = logging.handlers.RotatingFileHandler(
            os.path.join(log_dir, filename),
            maxBytes=max_bytes,
            backupCount=backup_count,
        )
        handler.setLevel(level)
        handler.setFormatter(build_formatter(formatter_type))
        return handler

    @classmethod
    def create_app_handler(
        cls,
        log_dir: str = "logs",
        max_bytes: int = 10485760,  # 10MB
        backup_count: int = 5,
        level: int = logging.INFO,
        formatter_type: str = "console",
    ) -> logging.handlers.RotatingFileHandler:
        """Create application log handler"""
        return cls._rotating(
            log_dir, cls.APP_LOG, max_bytes, backup_count, level, formatter_type
        )

    @classmethod
    def create_error_handler(
        cls,
        log_dir: str = "logs",
        max_bytes: int = 10485760,  # 10MB
        backup_count: int = 5,
        formatter_type: str = "console",
    ) -> logging.handlers.RotatingFileHandler:
        """Create error log handler"""
        return cls._rotating(
            log_dir, cls.ERROR_LOG, max_bytes, backup_count, logging.ERROR, formatter_type
        )

    @classmethod
    def create_worker_handler(
        cls,
        log_dir: str = "logs",
        max_bytes: int = 10485760,  # 10MB
        backup_count: int = 5,
        level: int = logging.INFO,
    ) -> logging.handlers.RotatingFileHandler:
        """Create the batch worker log handler (structured JSON lines)"""
        handler = cls._rotating(
            log_dir, cls.WORKER_LOG, max_bytes, backup_count, level, "structured"
        )
        handler.addFilter(_PrefixFilter(cls.WORKER_LOGGER_PREFIXES))
        return handler


class ConsoleHandler:
    """Console handler factory"""

    @staticmethod
    def create_handler(
        level: int = logging.INFO, formatter_type: str = "console"
    ) -> logging.StreamHandler:
        """Create console handler with specified formatter"""
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(build_formatter(formatter_type))
        return handler


class _PrefixFilter(logging.Filter):
    def __init__(self, prefixes):
        super().__init__()
        self.prefixes = tuple(prefixes)

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name.startswith(self.prefixes)
