"""Logging configuration for the kitsune_jinja2 logger tree."""
import logging
import sys
import os
from typing import Optional

from kitsune_jinja2.config.settings import ConverterSettings

PACKAGE_LOGGER = "kitsune_jinja2"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None,
                  settings: Optional[ConverterSettings] = None) -> logging.Logger:
    """
    Attach a handler to the package logger.

    The converter never calls this on its own; embedding applications opt in.
    Only the `kitsune_jinja2` logger tree is touched, the root logger is left alone.

    Args:
        level: Logging level name. Falls back to settings.log_level, then WARNING.
        log_file: Optional path to log file. If None, logs to stdout.
        settings: Optional settings supplying the default level.

    Returns:
        The configured package logger.
    """
    if level is None:
        level = settings.log_level if settings is not None else "WARNING"
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        handler: logging.Handler = logging.FileHandler(log_file)
    else:
        handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    # Reconfiguring replaces the previous handlers instead of stacking them.
    for old_handler in list(package_logger.handlers):
        package_logger.removeHandler(old_handler)
        old_handler.close()
    package_logger.addHandler(handler)
    package_logger.setLevel(numeric_level)

    package_logger.info("Logging initialized at %s level", level.upper())
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name, typically __name__ from the calling module

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
