"""Logging configuration for the scheduler."""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from wordlearn.config import LoggingSettings, settings


def setup_logging(logging_settings: Optional[LoggingSettings] = None) -> None:
    """Set up logging configuration."""
    logging_settings = logging_settings or settings.logging

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging_settings.level)

    # Remove any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(logging_settings.format)

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler if a log directory is specified
    if logging_settings.dir:
        log_dir = Path(logging_settings.dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / "wordlearn.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=logging_settings.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Set logging levels for third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.info(f"Logging configured with level: {logging_settings.level}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)
