"""Service layer implementing business logic.

Services connect ports (interfaces) with adapters (implementations),
providing high-level business operations to the application layer.
"""

from hiscorebot.core.services.channel_service import ChannelService
from hiscorebot.core.services.chat_commands import ChatCommandHandler
from hiscorebot.core.services.hiscore_service import HiscoreService, same_experience, select_mode

__all__ = [
    "ChannelService",
    "ChatCommandHandler",
    "HiscoreService",
    "same_experience",
    "select_mode",
]
