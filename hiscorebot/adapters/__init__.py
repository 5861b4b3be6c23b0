"""Adapter implementations for external services."""

from .database import DatabaseAdapter
from .discord_adapter import DiscordAdapter
from .hiscore_api import HiscoreAPIAdapter

__all__ = ["DatabaseAdapter", "DiscordAdapter", "HiscoreAPIAdapter"]
