"""
Global configuration settings for paramtweak.

Loads configuration from environment variables (and a .env file, if
present) and provides typed access to them.
"""

import os
from typing import Optional, Dict, Any
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


@dataclass
class Settings:
    """Global settings for paramtweak."""

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_file: Optional[str] = None

    # Service tried for listen addresses that name no port
    listen_service: str = "http"

    # Parameter overrides applied after defaults, name -> text
    param_overrides: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Load settings from environment variables."""
        self.log_level = os.getenv("LOG_LEVEL", self.log_level)
        self.log_format = os.getenv("PARAMTWEAK_LOG_FORMAT", self.log_format)
        self.log_file = os.getenv("PARAMTWEAK_LOG_FILE", self.log_file) or None
        self.listen_service = os.getenv("PARAMTWEAK_LISTEN_SERVICE", self.listen_service)

        if os.getenv("PARAMTWEAK_PARAMS"):
            self.param_overrides.update(parse_overrides(os.getenv("PARAMTWEAK_PARAMS")))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "log_level": self.log_level,
            "log_format": self.log_format,
            "log_file": self.log_file,
            "listen_service": self.listen_service,
            "param_overrides": dict(self.param_overrides),
        }


def parse_overrides(text: str) -> Dict[str, str]:
    """
    Parse ``name=value;name=value`` into a dict.

    Values may contain commas (pool triples, listen addresses), hence the
    semicolon separator. Entries without ``=`` are ignored.
    """
    overrides = {}
    for item in text.split(";"):
        name, sep, value = item.partition("=")
        if sep and name.strip():
            overrides[name.strip()] = value.strip()
    return overrides


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure(**kwargs) -> Settings:
    """
    Configure global settings.

    Args:
        **kwargs: Settings attributes to replace; unknown names are ignored

    Returns:
        Configured Settings instance
    """
    settings = get_settings()

    for key, value in kwargs.items():
        if hasattr(settings, key):
            setattr(settings, key, value)

    return settings
