"""Logging utilities."""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .config_loader import get_nested

ROOT_LOGGER_NAME = "camsync"


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Set up and configure a logger.

    Args:
        name: Logger name.
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional file path for logging.
        console: Whether to log to console.
        format_string: Custom format string.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers
    logger.handlers = []

    # Default format
    if format_string is None:
        format_string = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

    formatter = logging.Formatter(format_string, datefmt="%Y-%m-%d %H:%M:%S")

    # Console handler
    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get an existing logger or create a basic one.

    Loggers below an already configured parent (e.g. 'camsync.sync') are
    returned untouched so records propagate to the parent handlers.

    Args:
        name: Logger name.

    Returns:
        Logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.hasHandlers():
        logger = setup_logger(name)

    return logger


def configure_logging(config: Dict[str, Any]) -> logging.Logger:
    """
    Configure the package root logger from the 'logging' config section.

    Args:
        config: Loaded configuration dictionary.

    Returns:
        The configured 'camsync' logger.
    """
    return setup_logger(
        name=ROOT_LOGGER_NAME,
        level=get_nested(config, "logging.level", "INFO"),
        log_file=get_nested(config, "logging.log_file"),
        console=get_nested(config, "logging.console", True),
        format_string=get_nested(config, "logging.format"),
    )


class LoggerMixin:
    """Mixin class to add logging to any class."""

    @property
    def logger(self) -> logging.Logger:
        """Get class-specific logger."""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(f"{ROOT_LOGGER_NAME}.{self.__class__.__name__}")
        return self._logger
