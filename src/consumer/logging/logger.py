"""Stdout loggers for the consumer; Cloud Run ships each line to Cloud Logging."""

import logging
import sys

from src.consumer.config.settings import settings


def setup_logger(name: str = "consumer") -> logging.Logger:
    """Per-module logger: `logger = setup_logger(__name__)`. Level comes from APP_LOG_LEVEL."""
    logger = logging.getLogger(name)

    # Prevent duplicate handlers in reload environments (uvicorn --reload)
    if logger.handlers:
        return logger

    logger.setLevel(settings.app_log_level.upper())

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Avoid propagating to root and double-printing
    logger.propagate = False
    return logger
