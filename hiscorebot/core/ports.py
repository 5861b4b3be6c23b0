"""Port interfaces for hexagonal architecture.

These ports define the contracts between the core domain and external adapters.
All external dependencies must implement these interfaces.
"""

from abc import ABC, abstractmethod
from typing import Any

from hiscorebot.contracts import Channel, GameMode


class HiscoreAPIPort(ABC):
    """Port for the OSRS hiscore service."""

    @abstractmethod
    async def fetch(self, player: str, mode: GameMode) -> str:
        """Return the raw hiscore text for a player under one game mode.

        Raises ModeMismatch on a non-200 status and TransportError when the
        service cannot be reached.
        """
        pass

    async def close(self) -> None:
        """Release any held connections."""
        return None


class ChannelDatabasePort(ABC):
    """Port for channel persistence."""

    @abstractmethod
    async def get_channel(self, name: str) -> Channel:
        """Get a channel by name; raises ChannelNotFoundError."""
        pass

    @abstractmethod
    async def get_all_channels(self) -> list[Channel]:
        """Get every stored channel."""
        pass

    @abstractmethod
    async def add_channel(self, name: str) -> Channel:
        """Create a disconnected channel; raises ChannelAlreadyExistsError."""
        pass

    @abstractmethod
    async def update_channel(self, name: str, /, **fields: Any) -> Channel:
        """Update fields of an existing channel; raises ChannelNotFoundError."""
        pass


class ChatPort(ABC):
    """Port for the chat service the bot talks in."""

    @abstractmethod
    async def say(self, channel: str, text: str) -> None:
        """Send a message to a channel."""
        pass

    @abstractmethod
    async def join(self, channel: str) -> None:
        """Start serving commands in a channel."""
        pass

    @abstractmethod
    async def depart(self, channel: str) -> None:
        """Stop serving commands in a channel."""
        pass
