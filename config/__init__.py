"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
"""

from config.settings import settings, get_settings, Settings, BASE_DIR

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "BASE_DIR",
]
