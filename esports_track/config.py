"""
Configuration values for the esports-track API
Reads the numeric tunables from the environment and sets up module loggers.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

from .constants import (
    DEFAULT_BACKOFF_MS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT_MS,
)


API_TIMEOUT_MS = int(os.getenv("API_TIMEOUT_MS", DEFAULT_TIMEOUT_MS))
"""Default per-attempt timeout (milliseconds) for outbound API calls."""

API_MAX_RETRIES = int(os.getenv("API_MAX_RETRIES", DEFAULT_MAX_RETRIES))
"""Retries after the first attempt for transient upstream failures."""

API_BACKOFF_MS = int(os.getenv("API_BACKOFF_MS", DEFAULT_BACKOFF_MS))
"""Base of the exponential backoff between retries (milliseconds)."""


def setup_logger(name: str) -> logging.Logger:
    """Create or retrieve a configured logger for the application."""

    logger = logging.getLogger(name)

    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    logger.setLevel(log_level)

    if logging.getLogger().handlers:
        logger.propagate = True
        return logger

    if not logger.handlers:
        log_file = os.path.join(os.path.dirname(os.path.dirname(__file__)), "esports_track.log")
        os.makedirs(os.path.dirname(log_file), exist_ok=True)
        handler = RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
        formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        logger.addHandler(handler)
        logger.propagate = False

    return logger
