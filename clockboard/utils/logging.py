"""Logging setup shared by the service entry points."""
from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(name: str = "clockboard", level: str | int = "INFO") -> logging.Logger:
    """Configure logging for the application if it is not already configured."""

    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level if isinstance(level, int) else getattr(logging, str(level).upper(), logging.INFO))

    # Child loggers (clockboard.*) report through this handler only
    logger.propagate = False
    return logger
