# Configuration module.
# Environment-driven settings shared by the API and the storage layer.

from .settings import Settings, SettingsError, get_settings, load_settings

__all__ = ["Settings", "SettingsError", "get_settings", "load_settings"]
