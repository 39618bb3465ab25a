"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository, build_config
from .models import DEFAULT_URL, GhostsheetConfig, Mode

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "DEFAULT_URL",
    "GhostsheetConfig",
    "Mode",
    "build_config",
]
