"""
Configuration module for paramtweak.

Provides environment-driven settings management.
"""

from paramtweak.config.settings import Settings, get_settings, configure

__all__ = [
    "Settings",
    "get_settings",
    "configure",
]
