"""Configuration module for DocuExpiry."""

from .settings import get_settings, reset_settings_cache, Settings

__all__ = ["get_settings", "reset_settings_cache", "Settings"]
