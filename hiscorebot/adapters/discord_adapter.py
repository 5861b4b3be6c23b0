"""
Discord adapter: the chat front end of the bot.

Channels are identified by the string form of their Discord channel id. The
bot only answers in channels it has joined (connected channels).
"""

import logging
from typing import Any

import discord
from discord.ext import commands

from hiscorebot.config.settings import get_settings
from hiscorebot.core.observability import clear_correlation_id, set_correlation_id
from hiscorebot.core.ports import ChatPort

logger = logging.getLogger(__name__)


class HiscoreBot(commands.Bot):
    """Discord client that forwards messages in joined channels."""

    def __init__(self, adapter: "DiscordAdapter", **kwargs: Any) -> None:
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True

        command_prefix = kwargs.pop("command_prefix", get_settings().bot_prefix)
        super().__init__(command_prefix=command_prefix, intents=intents, **kwargs)
        self.adapter = adapter

    async def on_ready(self) -> None:
        logger.info(f"Bot {self.user} is ready!")
        logger.info(f"Connected to {len(self.guilds)} guilds")
        await self.change_presence(
            activity=discord.Game(name="!lvl <skill> <player>"),
            status=discord.Status.online,
        )

    async def on_message(self, message: discord.Message) -> None:
        if message.author.bot:
            return
        await self.adapter.dispatch_message(
            channel=str(message.channel.id),
            username=message.author.name,
            display_name=message.author.display_name,
            text=message.content,
        )


class DiscordAdapter(ChatPort):
    """ChatPort implementation on top of discord.py."""

    def __init__(self, bot: commands.Bot | None = None) -> None:
        self.bot = bot or HiscoreBot(self)
        self.joined: set[str] = set()
        self.command_handler: Any | None = None

    def set_command_handler(self, handler: Any) -> None:
        """Register the ChatCommandHandler that receives joined-channel messages."""
        self.command_handler = handler

    async def dispatch_message(
        self, channel: str, username: str, display_name: str, text: str
    ) -> None:
        if channel not in self.joined or self.command_handler is None:
            return
        set_correlation_id(f"discord-{channel}")
        try:
            await self.command_handler.handle_message(channel, username, display_name, text)
        except Exception:
            logger.exception("Unhandled error for message in channel %s", channel)
        finally:
            clear_correlation_id()

    async def say(self, channel: str, text: str) -> None:
        target = self.bot.get_channel(int(channel))
        if target is None:
            target = await self.bot.fetch_channel(int(channel))
        await target.send(text)

    async def join(self, channel: str) -> None:
        self.joined.add(channel)
        logger.info("Joined channel %s", channel)

    async def depart(self, channel: str) -> None:
        self.joined.discard(channel)
        logger.info("Departed channel %s", channel)

    async def start_async(self) -> None:
        """Connect to Discord and block until the bot is closed."""
        settings = get_settings()
        if not settings.discord_bot_token:
            raise RuntimeError("DISCORD_BOT_TOKEN is not configured")
        await self.bot.start(settings.discord_bot_token)

    async def stop(self) -> None:
        if not self.bot.is_closed():
            await self.bot.close()
        logger.info("Discord bot stopped")
