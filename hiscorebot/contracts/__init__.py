"""Contract models for data validation."""

from .channel import Channel
from .hiscores import (
    CLUE_NAMES,
    SKILL_NAMES,
    ClueTier,
    GameMode,
    MinigameScore,
    PlayerQuery,
    Scoreboard,
    Skill,
    SkillScore,
)

__all__ = [
    "CLUE_NAMES",
    "SKILL_NAMES",
    "Channel",
    "ClueTier",
    "GameMode",
    "MinigameScore",
    "PlayerQuery",
    "Scoreboard",
    "Skill",
    "SkillScore",
]
