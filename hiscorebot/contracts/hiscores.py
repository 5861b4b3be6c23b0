"""
Hiscore data contracts.

Models mirror the fixed layout of the OSRS `index_lite.ws` response: 24 skills,
two Bounty Hunter roles, Last Man Standing and seven clue tiers. All models are
frozen; a Scoreboard never changes after it is parsed.
"""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Unranked slots carry -1 placeholders straight from the service
UNRANKED = -1


class GameMode(Enum):
    """Account type, each tracked on its own hiscore ledger."""

    NORMAL = ("Normal", "")
    IRONMAN = ("Ironman", "_ironman")
    HARDCORE_IRONMAN = ("Hardcore Ironman", "_hardcore_ironman")
    ULTIMATE_IRONMAN = ("Ultimate Ironman", "_ultimate")

    def __init__(self, display_name: str, url_suffix: str) -> None:
        self.display_name = display_name
        self.url_suffix = url_suffix

    @property
    def slug(self) -> str:
        return self.name.lower()

    @classmethod
    def from_slug(cls, slug: str) -> GameMode:
        """Look up a mode from a user supplied slug such as ``hardcore``."""
        key = slug.strip().lower().replace("-", "_").replace(" ", "_")
        aliases = {
            "hardcore": cls.HARDCORE_IRONMAN,
            "hcim": cls.HARDCORE_IRONMAN,
            "ultimate": cls.ULTIMATE_IRONMAN,
            "uim": cls.ULTIMATE_IRONMAN,
            "im": cls.IRONMAN,
        }
        if key in aliases:
            return aliases[key]
        for mode in cls:
            if mode.slug == key:
                return mode
        raise ValueError(f"Unknown game mode: {slug}")


class Skill(IntEnum):
    """Skill slot indices in hiscore order."""

    OVERALL = 0
    ATTACK = 1
    DEFENSE = 2
    STRENGTH = 3
    HITPOINTS = 4
    RANGED = 5
    PRAYER = 6
    MAGIC = 7
    COOKING = 8
    WOODCUTTING = 9
    FLETCHING = 10
    FISHING = 11
    FIREMAKING = 12
    CRAFTING = 13
    SMITHING = 14
    MINING = 15
    HERBLORE = 16
    AGILITY = 17
    THIEVING = 18
    SLAYER = 19
    FARMING = 20
    RUNECRAFT = 21
    HUNTER = 22
    CONSTRUCTION = 23

    @property
    def display_name(self) -> str:
        return SKILL_NAMES[self]


class ClueTier(IntEnum):
    """Clue scroll tier indices in hiscore order."""

    OVERALL = 0
    BEGINNER = 1
    EASY = 2
    MEDIUM = 3
    HARD = 4
    ELITE = 5
    MASTER = 6

    @property
    def display_name(self) -> str:
        return CLUE_NAMES[self]


SKILL_NAMES: tuple[str, ...] = (
    "Overall",
    "Attack",
    "Defense",
    "Strength",
    "Hitpoints",
    "Ranged",
    "Prayer",
    "Magic",
    "Cooking",
    "Woodcutting",
    "Fletching",
    "Fishing",
    "Firemaking",
    "Crafting",
    "Smithing",
    "Mining",
    "Herblore",
    "Agility",
    "Thieving",
    "Slayer",
    "Farming",
    "Runecraft",
    "Hunter",
    "Construction",
)

CLUE_NAMES: tuple[str, ...] = (
    "Overall",
    "Beginner",
    "Easy",
    "Medium",
    "Hard",
    "Elite",
    "Master",
)

SKILL_COUNT = len(SKILL_NAMES)
CLUE_COUNT = len(CLUE_NAMES)


class SkillScore(BaseModel):
    """Hiscore entry for a single skill."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    rank: int = Field(..., ge=UNRANKED, description="Hiscore rank, -1 when unranked")
    level: int | None = Field(default=None, ge=UNRANKED, description="Skill level")
    experience: int = Field(..., ge=UNRANKED, description="Total experience")

    @property
    def is_ranked(self) -> bool:
        return self.rank != UNRANKED


class MinigameScore(BaseModel):
    """Hiscore entry for anything that is not a skill."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    rank: int = Field(..., ge=UNRANKED, description="Hiscore rank, -1 when unranked")
    score: int = Field(..., ge=UNRANKED, description="Score or completion count")

    @property
    def is_ranked(self) -> bool:
        return self.rank != UNRANKED


class Scoreboard(BaseModel):
    """All hiscores of one player under one game mode."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    skills: tuple[SkillScore, ...]
    bounty_hunter_hunter: MinigameScore
    bounty_hunter_rogue: MinigameScore
    last_man_standing: MinigameScore
    clues: tuple[MinigameScore, ...]

    @model_validator(mode="after")
    def _check_slot_counts(self) -> Scoreboard:
        if len(self.skills) != SKILL_COUNT:
            raise ValueError(f"expected {SKILL_COUNT} skill slots, got {len(self.skills)}")
        if len(self.clues) != CLUE_COUNT:
            raise ValueError(f"expected {CLUE_COUNT} clue slots, got {len(self.clues)}")
        return self

    def skill(self, skill: Skill) -> SkillScore:
        return self.skills[skill]

    def clue(self, tier: ClueTier) -> MinigameScore:
        return self.clues[tier]

    @property
    def experience_vector(self) -> tuple[int, ...]:
        """Experience of every skill in slot order.

        Identical vectors on two ledgers mean both entries describe the same
        account.
        """
        return tuple(s.experience for s in self.skills)


class PlayerQuery(BaseModel):
    """A validated player handle (OSRS names are at most 12 characters)."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    player: str = Field(..., min_length=1, max_length=12)
