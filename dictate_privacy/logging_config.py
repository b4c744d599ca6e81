"""Logging configuration for dictate-privacy."""

import logging
import sys

from dictate_privacy.config import APP_DIR

LOG_DIR = APP_DIR / "logs"
LOG_FILE = LOG_DIR / "dictate_privacy.log"

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"


def _is_console(handler: logging.Handler) -> bool:
    # FileHandler subclasses StreamHandler
    return isinstance(handler, logging.StreamHandler) and not isinstance(
        handler, logging.FileHandler
    )


def _file_handler() -> logging.FileHandler:
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Set up logging for the ``dictate_privacy`` logger hierarchy.

    Calling it again only changes the console level.

    Args:
        level: Console logging level (default: INFO). The log file always
            receives DEBUG records.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("dictate_privacy")
    logger.setLevel(logging.DEBUG)

    if logger.handlers:
        for handler in logger.handlers:
            if _is_console(handler):
                handler.setLevel(level)
        return logger

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(console_handler)

    try:
        logger.addHandler(_file_handler())
    except OSError as e:
        logger.warning(f"Could not set up file logging: {e}")

    return logger
