"""Logging configuration for CardSheet.

This module provides logging setup with a single format shared by the API,
the sheet loader and the command-line scripts.
"""

import logging
import sys
import os
from typing import Optional

# Default log level based on environment
DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_level: Optional[str] = None) -> logging.Logger:
    """Set up logging configuration.

    Args:
        log_level: Log level (DEBUG, INFO, WARN, ERROR). If None, uses DEFAULT_LOG_LEVEL.

    Returns:
        Configured root CardSheet logger
    """
    level = (log_level or DEFAULT_LOG_LEVEL).upper()

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    return logging.getLogger("cardsheet")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name.

    Args:
        name: Short component name, e.g. "ingest.grid_parser"

    Returns:
        Logger instance under the "cardsheet" namespace
    """
    return logging.getLogger(f"cardsheet.{name}")


# Initialize default logger
logger = setup_logging()
