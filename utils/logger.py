"""
Logging utilities for the sand table controller.
"""
import logging
import sys
from config import LOG_LEVEL, LOG_FILE

ROOT_LOGGER_NAME = "sand_table"

_logger = None


def setup_logger(name: str = ROOT_LOGGER_NAME, level: str = None) -> logging.Logger:
    """Set up and return the application logger."""
    global _logger

    if _logger is not None:
        if level:
            _logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        return _logger

    level = level or LOG_LEVEL
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Avoid duplicate handlers
    if logger.handlers:
        _logger = logger
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    ))
    logger.addHandler(console_handler)

    if LOG_FILE:
        try:
            file_handler = logging.FileHandler(LOG_FILE)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Could not set up file logging: {e}")

    _logger = logger
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a logger under the application logger (e.g. sand_table.execution.motion)."""
    root = _logger or setup_logger()
    if not name or name == root.name:
        return root
    return root.getChild(name)
