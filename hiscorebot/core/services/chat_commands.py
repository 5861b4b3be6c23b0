"""Chat command handling.

Supported commands (first word of the message):

- ``!lvl <skill> [player]`` / ``!level <skill> [player]``
- ``!total [player]`` / ``!overall [player]``

The player is the rest of the message and may contain spaces. When omitted,
the channel's stored default player (rsn) is used.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from hiscorebot.contracts import GameMode, SkillScore
from hiscorebot.core import metrics
from hiscorebot.core.errors import (
    ChannelNotFoundError,
    HiscoreError,
    ModeMismatch,
    UnknownSkillNameError,
)
from hiscorebot.core.ports import ChannelDatabasePort, ChatPort
from hiscorebot.core.services.hiscore_service import HiscoreService
from hiscorebot.core.skills import resolve_skill_name

logger = logging.getLogger(__name__)

# Longest possible OSRS display name
MAX_PLAYER_LENGTH = 12

LEVEL_COMMANDS = frozenset({"!lvl", "!level"})
TOTAL_COMMANDS = frozenset({"!total", "!overall"})


def format_skill_lookup(
    display_name: str, player: str, skill_name: str, mode: GameMode, score: SkillScore
) -> str:
    level = score.level if score.level is not None else 0
    return (
        f"@{display_name} - {player} | {skill_name} level: {level:,} | "
        f"Rank ({mode.display_name}): {score.rank:,} | Exp: {score.experience:,}"
    )


class ChatCommandHandler:
    """Turns chat messages into hiscore lookups and replies."""

    def __init__(
        self,
        hiscores: HiscoreService,
        chat: ChatPort,
        db: ChannelDatabasePort,
        ignored_users: Iterable[str] = ("streamelements",),
    ) -> None:
        self.hiscores = hiscores
        self.chat = chat
        self.db = db
        self.ignored_users = frozenset(u.lower() for u in ignored_users)

    def is_ignored(self, username: str) -> bool:
        name = username.lower()
        return name.endswith("bot") or name in self.ignored_users

    async def _default_player(self, channel: str) -> str:
        try:
            return (await self.db.get_channel(channel)).rsn
        except ChannelNotFoundError:
            return ""

    async def handle_message(
        self, channel: str, username: str, display_name: str, text: str
    ) -> str | None:
        """Handle one chat message; returns the reply sent, if any."""
        if self.is_ignored(username):
            return None

        command, _, rest = text.strip().partition(" ")
        command = command.lower()
        rest = rest.strip()

        if command in LEVEL_COMMANDS:
            skill_name, _, player = rest.partition(" ")
            if not skill_name:
                return None
        elif command in TOTAL_COMMANDS:
            skill_name, player = "overall", rest
        else:
            return None

        logger.info("Handling %r from channel %s", text, channel)
        player = player.strip() or await self._default_player(channel)
        if not player:
            metrics.mark_chat_command(command, "no_player")
            return None

        return await self.handle_skill_lookup(
            channel, display_name, skill_name, player[:MAX_PLAYER_LENGTH], command=command
        )

    async def handle_skill_lookup(
        self,
        channel: str,
        display_name: str,
        skill_name: str,
        player: str,
        command: str = "!lvl",
    ) -> str | None:
        try:
            skill = resolve_skill_name(skill_name)
        except UnknownSkillNameError:
            # Unknown skills are ignored without a reply
            logger.debug("Ignoring unknown skill %r", skill_name)
            metrics.mark_chat_command(command, "unknown_skill")
            return None

        try:
            scoreboard, mode = await self.hiscores.resolve(player)
        except ModeMismatch:
            reply = f"@{display_name} Could not find player {player}"
            metrics.mark_chat_command(command, "not_found")
        except HiscoreError as e:
            logger.warning("Lookup for %s failed: %s", player, e)
            reply = f"@{display_name} Hiscores are unavailable right now, try again later"
            metrics.mark_chat_command(command, "error")
        else:
            reply = format_skill_lookup(
                display_name, player, skill.display_name, mode, scoreboard.skill(skill)
            )
            metrics.mark_chat_command(command, "ok")

        await self.chat.say(channel, reply)
        return reply
