"""Channel lifecycle: persist connection state, then join or leave in chat."""

import logging

from hiscorebot.contracts import Channel
from hiscorebot.core.ports import ChannelDatabasePort, ChatPort

logger = logging.getLogger(__name__)


class ChannelService:
    def __init__(self, db: ChannelDatabasePort, chat: ChatPort) -> None:
        self.db = db
        self.chat = chat

    async def add_channel(self, name: str) -> Channel:
        return await self.db.add_channel(name)

    async def get_channel(self, name: str) -> Channel:
        return await self.db.get_channel(name)

    async def connect_to_channel(self, name: str) -> Channel:
        """Mark an existing channel connected and join it.

        Raises:
            ChannelNotFoundError: the channel was never added
        """
        logger.info("Attempting to connect to %s", name)
        try:
            channel = await self.db.update_channel(name, is_connected=True)
        except Exception:
            logger.warning("Connection to %s failed", name)
            raise
        await self.chat.join(channel.name)
        logger.info("Connected to %s", name)
        return channel

    async def disconnect_from_channel(self, name: str) -> Channel:
        """Mark a channel disconnected and leave it. The record is kept."""
        logger.info("Attempting to disconnect from %s", name)
        try:
            channel = await self.db.update_channel(name, is_connected=False)
        except Exception:
            logger.warning("Disconnect from %s failed", name)
            raise
        await self.chat.depart(channel.name)
        logger.info("Disconnected from %s", name)
        return channel

    async def change_rsn(self, name: str, rsn: str) -> Channel:
        """Set the default player looked up in a channel ("" clears it)."""
        logger.info("Changing rsn of channel %s to %r", name, rsn)
        return await self.db.update_channel(name, rsn=rsn[:12])

    async def init_bot(self) -> list[Channel]:
        """Join every connected channel; returns the joined channels."""
        logger.info("Reading channels from DB")
        channels = [c for c in await self.db.get_all_channels() if c.is_connected]

        logger.info("Joining %d channels", len(channels))
        for channel in channels:
            await self.chat.join(channel.name)
        return channels
