"""
Logging utilities for the crawler.
"""

import logging
import json
import sys
from pathlib import Path
from typing import Dict, Any, Optional
from datetime import datetime, timezone

from .config import LoggingConfig


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        for key in ('url', 'worker'):
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False)


class CrawlerLogAdapter(logging.LoggerAdapter):
    """Logger adapter that adds crawler-specific context."""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        """Add extra context to log messages."""
        kwargs['extra'] = {**self.extra, **kwargs.get('extra', {})}
        return msg, kwargs

    def bind(self, **context) -> 'CrawlerLogAdapter':
        """New adapter on the same logger with additional context."""
        return CrawlerLogAdapter(self.logger, {**self.extra, **context})


def setup_logging(config: LoggingConfig, log_file: Optional[str] = None) -> logging.Logger:
    """
    Setup logging for the crawler.

    Args:
        config: Logging configuration
        log_file: Overrides ``config.file``; without either, logs go to the console

    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper()))
    root_logger.handlers.clear()

    if config.json:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(config.format, datefmt=config.datefmt)

    log_file = log_file or config.file
    if log_file:
        log_path = Path(log_file)
        if log_path.parent != Path('.'):
            log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, mode='w', encoding='utf-8')
    else:
        handler = logging.StreamHandler(sys.stdout)

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Configure third-party loggers
    third_party_loggers = {
        'aiohttp': logging.WARNING,
        'asyncio': logging.WARNING,
        'urllib3': logging.WARNING,
    }

    for logger_name, level in third_party_loggers.items():
        logging.getLogger(logger_name).setLevel(level)

    root_logger.debug(f"Logging initialized (level={config.level}, file={log_file or 'console'})")
    return root_logger


def get_crawler_logger(name: str, **extra_context) -> CrawlerLogAdapter:
    """
    Get a crawler-specific logger with additional context.

    Args:
        name: Logger name
        **extra_context: Additional context fields to include in all log messages

    Returns:
        CrawlerLogAdapter instance
    """
    logger = logging.getLogger(name)
    return CrawlerLogAdapter(logger, extra_context)


def log_system_info():
    """Log system and environment information."""
    import platform
    import psutil

    logger = logging.getLogger(__name__)

    logger.debug("=== SYSTEM INFORMATION ===")
    logger.debug(f"Platform: {platform.platform()}")
    logger.debug(f"Python version: {sys.version}")
    logger.debug(f"CPU cores: {psutil.cpu_count()}")
    logger.debug(f"Memory: {psutil.virtual_memory().total / 1024**3:.1f} GB")
