"""
Centralized logging configuration.
All modules should use get_logger() instead of print().
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = 'tagcache'

# Cache for logger instances
_loggers = {}

DEFAULT_FORMAT = '%(asctime)s [%(name)s] %(levelname)s: %(message)s'
THREAD_FORMAT = '%(asctime)s [%(name)s] [%(threadName)s] %(levelname)s: %(message)s'


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None,
                  show_threads: bool = False):
    """
    Configure the application root logger.
    Call this once at application startup.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR). Defaults to INFO.
        log_file: Optional file path for log output
        show_threads: Include the thread name in every record. Handy when
            following the scheduler thread and request handlers side by side.
    """
    log_level = getattr(logging, (level or 'INFO').upper(), logging.INFO)
    formatter = logging.Formatter(THREAD_FORMAT if show_threads else DEFAULT_FORMAT)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(log_level)

    # Clear existing handlers so repeated app creation does not duplicate output
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name, e.g. 'TagCache' or 'Scheduler'

    Returns:
        Logger named ``tagcache.<name>``

    Usage:
        logger = get_logger('TagCache')
        logger.info("Loading all tags...")
        logger.error("Load all tags failed", exc_info=True)
    """
    if name not in _loggers:
        _loggers[name] = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    return _loggers[name]
