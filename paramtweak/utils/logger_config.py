"""
Logging configuration for paramtweak.

Every module logs through ``logging.getLogger(__name__)``, so all records
land under the ``paramtweak`` logger configured here.
"""

import logging
import sys
from typing import Optional


ROOT_LOGGER = "paramtweak"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def reset_logging() -> logging.Logger:
    """Detach and close every handler on the paramtweak logger."""
    root_logger = logging.getLogger(ROOT_LOGGER)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    return root_logger


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Route paramtweak records to stdout and, optionally, a file.

    Repeated calls replace the handlers installed by the previous one.

    Args:
        level: Logging level name; unknown names mean INFO
        format_string: Log record format
        log_file: Optional file to append records to

    Returns:
        The paramtweak logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    root_logger = reset_logging()
    root_logger.setLevel(numeric_level)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    return root_logger
