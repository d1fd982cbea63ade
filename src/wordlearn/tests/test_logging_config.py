"""Tests for logging configuration."""
import logging
from logging.handlers import RotatingFileHandler

import pytest

from wordlearn.config import LoggingSettings
from wordlearn.logging_config import get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Keep the root logger configuration of the test run."""
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)


def test_console_logging() -> None:
    """Test logging without a log directory."""
    setup_logging(LoggingSettings(level="DEBUG", dir=None))

    root_logger = logging.getLogger()
    assert root_logger.level == logging.DEBUG
    assert len(root_logger.handlers) == 1
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_file_logging(tmp_path) -> None:
    """Test that a log directory adds a size-rotated file handler."""
    log_dir = tmp_path / "logs"
    setup_logging(LoggingSettings(level="INFO", dir=str(log_dir)))

    get_logger("wordlearn.test").info("hello from the test")

    file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    file_handlers[0].flush()
    assert "hello from the test" in (log_dir / "wordlearn.log").read_text(encoding="utf-8")


def test_setup_is_repeatable() -> None:
    """Test that configuring twice does not duplicate handlers."""
    setup_logging(LoggingSettings(dir=None))
    setup_logging(LoggingSettings(dir=None))

    assert len(logging.getLogger().handlers) == 1
