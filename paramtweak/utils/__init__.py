"""
Utility module for paramtweak.

Provides logging configuration.
"""

from paramtweak.utils.logger_config import (
    ROOT_LOGGER,
    reset_logging,
    setup_logging,
)

__all__ = [
    "ROOT_LOGGER",
    "reset_logging",
    "setup_logging",
]
