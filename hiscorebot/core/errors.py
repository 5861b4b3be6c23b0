"""Domain exceptions for hiscore lookups and channel persistence."""

from __future__ import annotations

from hiscorebot.contracts.hiscores import GameMode


class HiscoreError(Exception):
    """Base class for hiscore lookup failures."""


class TransportError(HiscoreError):
    """The hiscore service could not be reached (DNS, timeout, refused)."""

    def __init__(self, player: str, mode: GameMode, reason: str) -> None:
        super().__init__(f"Hiscore request for {player} ({mode.display_name}) failed: {reason}")
        self.player = player
        self.mode = mode


class ModeMismatch(HiscoreError):
    """The player has no hiscore entry under the given game mode."""

    def __init__(self, player: str, mode: GameMode, status_code: int | None = None) -> None:
        super().__init__(f"{player} is not a(n) {mode.display_name} account")
        self.player = player
        self.mode = mode
        self.status_code = status_code


class MalformedScoreboardError(HiscoreError):
    """The hiscore response does not have the expected token layout."""


class UnknownSkillNameError(HiscoreError):
    """A skill name or alias did not map to any skill."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Could not map name to skill: {name!r}")
        self.name = name


class ChannelError(Exception):
    """Base class for channel persistence failures."""

    def __init__(self, message: str, channel: str) -> None:
        super().__init__(message)
        self.channel = channel


class ChannelNotFoundError(ChannelError):
    def __init__(self, channel: str) -> None:
        super().__init__(f"Channel {channel} not found", channel)


class ChannelAlreadyExistsError(ChannelError):
    def __init__(self, channel: str) -> None:
        super().__init__(f"Channel {channel} already exists", channel)
