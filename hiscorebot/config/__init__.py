"""Application configuration."""

from hiscorebot.config.settings import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
