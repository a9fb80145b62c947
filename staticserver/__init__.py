"""Static file server package exports commonly used helpers for convenience."""

from .config import ConfigError, Settings, get_settings
from .logging_config import configure_logging

__version__ = "2.1.0"

__all__ = ["ConfigError", "Settings", "get_settings", "configure_logging", "__version__"]
