"""
Logging utility.

Application-wide logging configuration for services embedding feedrank.
"""

import logging
import sys
from typing import Optional

import config.settings as settings


def setup_logging(log_level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """
    Configure logging for the embedding application.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR (default: settings.LOG_LEVEL)
        log_file: Optional path for an additional file handler
    """
    level = (log_level or settings.LOG_LEVEL).upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        raise ValueError(f"Invalid log level: {log_level}")

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level),
        format=settings.LOG_FORMAT,
        handlers=handlers,
        force=True
    )
