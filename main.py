"""
Main entry point for the hiscore bot.
"""

import asyncio
import logging
import os
import sys

from hiscorebot.config.settings import get_settings
from hiscorebot.core.observability import configure_stdlib_json_logging


def setup_logging() -> None:
    """Set up structured JSON logging for both stderr and file."""
    settings = get_settings()

    try:
        os.makedirs("logs", exist_ok=True)
        file_target = os.path.join("logs", "hiscorebot.log")
    except OSError:
        file_target = "hiscorebot.log"

    configure_stdlib_json_logging(level=settings.app_log_level, file_target=file_target)

    # Reduce discord.py logging verbosity unless in debug mode
    if not settings.app_debug:
        logging.getLogger("discord").setLevel(logging.INFO)
        logging.getLogger("discord.http").setLevel(logging.WARNING)


def health_check() -> None:
    """Perform basic configuration checks before starting the bot."""
    logger = logging.getLogger(__name__)
    settings = get_settings()

    logger.info("Performing health checks...")

    if not settings.discord_bot_token or not settings.discord_bot_token.strip():
        logger.error("Discord bot token not found in environment variables!")
        sys.exit(1)

    if not settings.hiscore_base_url.startswith(("http://", "https://")):
        logger.error("HISCORE_BASE_URL must be an http(s) URL")
        sys.exit(1)

    logger.info("Health checks passed")


async def main() -> None:
    """Main async entry point."""
    logger = logging.getLogger(__name__)
    setup_logging()
    settings = get_settings()
    logger.info("Starting hiscore bot (%s)...", settings.app_env)
    health_check()

    from hiscorebot.adapters.database import DatabaseAdapter
    from hiscorebot.adapters.discord_adapter import DiscordAdapter
    from hiscorebot.adapters.hiscore_api import HiscoreAPIAdapter
    from hiscorebot.api.server import HiscoreAPIServer
    from hiscorebot.core.services import ChannelService, ChatCommandHandler, HiscoreService

    db_adapter = DatabaseAdapter()
    hiscore_api = HiscoreAPIAdapter()
    discord_adapter = DiscordAdapter()
    api_server: HiscoreAPIServer | None = None

    try:
        logger.info("Initializing adapters...")
        await db_adapter.connect()
        if not await db_adapter.health_check():
            raise RuntimeError("Database health check failed")

        hiscore_service = HiscoreService(hiscore_api)
        channel_service = ChannelService(db_adapter, discord_adapter)
        discord_adapter.set_command_handler(
            ChatCommandHandler(
                hiscore_service,
                discord_adapter,
                db_adapter,
                ignored_users=settings.bot_ignored_users,
            )
        )
        await channel_service.init_bot()

        api_server = HiscoreAPIServer(channel_service, hiscore_service)
        await api_server.start(host=settings.api_host, port=settings.api_port)

        logger.info("All services initialized. Connecting to Discord...")
        await discord_adapter.start_async()

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise
    finally:
        logger.info("Shutting down services...")
        try:
            await discord_adapter.stop()
        except Exception as e:
            logger.warning(f"Failed to stop Discord adapter cleanly: {e}")
        if api_server is not None:
            await api_server.stop()
        await hiscore_api.close()
        await db_adapter.disconnect()
        logger.info("All services stopped")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot stopped by user.")
    except Exception as e:
        print(f"Failed to start bot: {e}")
        sys.exit(1)
