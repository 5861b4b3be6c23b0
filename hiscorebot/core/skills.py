"""Skill name resolution.

Maps free-text skill names, as typed in chat, to hiscore skill slots. The
alias table is built once at import and is read-only.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from hiscorebot.contracts.hiscores import Scoreboard, Skill, SkillScore
from hiscorebot.core.errors import UnknownSkillNameError

SKILL_ALIASES: Mapping[str, Skill] = MappingProxyType(
    {
        "overall": Skill.OVERALL,
        "total": Skill.OVERALL,
        "attack": Skill.ATTACK,
        "atk": Skill.ATTACK,
        "defense": Skill.DEFENSE,
        "defence": Skill.DEFENSE,
        "def": Skill.DEFENSE,
        "strength": Skill.STRENGTH,
        "str": Skill.STRENGTH,
        "hitpoints": Skill.HITPOINTS,
        "hp": Skill.HITPOINTS,
        "ranged": Skill.RANGED,
        "range": Skill.RANGED,
        "ranging": Skill.RANGED,
        "prayer": Skill.PRAYER,
        "pray": Skill.PRAYER,
        "magic": Skill.MAGIC,
        "mage": Skill.MAGIC,
        "magician": Skill.MAGIC,
        "cooking": Skill.COOKING,
        "cook": Skill.COOKING,
        "woodcutting": Skill.WOODCUTTING,
        "woodcut": Skill.WOODCUTTING,
        "wc": Skill.WOODCUTTING,
        "fletching": Skill.FLETCHING,
        "fletch": Skill.FLETCHING,
        "fishing": Skill.FISHING,
        "fish": Skill.FISHING,
        "firemaking": Skill.FIREMAKING,
        "fm": Skill.FIREMAKING,
        "crafting": Skill.CRAFTING,
        "craft": Skill.CRAFTING,
        "smithing": Skill.SMITHING,
        "smith": Skill.SMITHING,
        "mining": Skill.MINING,
        "mine": Skill.MINING,
        "herblore": Skill.HERBLORE,
        "herb": Skill.HERBLORE,
        "agility": Skill.AGILITY,
        "agil": Skill.AGILITY,
        "thieving": Skill.THIEVING,
        "thieve": Skill.THIEVING,
        "thiev": Skill.THIEVING,
        "slayer": Skill.SLAYER,
        "slay": Skill.SLAYER,
        "farming": Skill.FARMING,
        "farm": Skill.FARMING,
        "kkona": Skill.FARMING,
        "runecraft": Skill.RUNECRAFT,
        "runecrafting": Skill.RUNECRAFT,
        "rc": Skill.RUNECRAFT,
        "hunter": Skill.HUNTER,
        "hunting": Skill.HUNTER,
        "hunt": Skill.HUNTER,
        "construction": Skill.CONSTRUCTION,
        "con": Skill.CONSTRUCTION,
    }
)


def resolve_skill_name(name: str, aliases: Mapping[str, Skill] = SKILL_ALIASES) -> Skill:
    """Map a skill name or alias (any case) to its skill slot.

    Raises:
        UnknownSkillNameError: when nothing matches
    """
    try:
        return aliases[name.strip().lower()]
    except KeyError:
        raise UnknownSkillNameError(name) from None


def lookup_skill(scoreboard: Scoreboard, name: str) -> tuple[str, SkillScore]:
    """Return the canonical skill name and its score for a free-text name."""
    skill = resolve_skill_name(name)
    return skill.display_name, scoreboard.skill(skill)
