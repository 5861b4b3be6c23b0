"""Parser for the OSRS ``index_lite.ws`` hiscore format.

The response is a whitespace-separated list of comma-joined integer tuples.
Layout is purely positional:

- tokens 0-23: skills as ``rank,level,experience``
- tokens 24-25: Bounty Hunter (hunter, rogue) as ``rank,score``
- token 26: Last Man Standing as ``rank,score``
- tokens 27-33: clue scrolls (overall, beginner .. master) as ``rank,score``

Unranked entries arrive as ``-1,...`` and are kept as data.
"""

from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from hiscorebot.contracts.hiscores import (
    CLUE_COUNT,
    SKILL_COUNT,
    MinigameScore,
    Scoreboard,
    SkillScore,
)
from hiscorebot.core.errors import MalformedScoreboardError

logger = logging.getLogger(__name__)

_BOUNTY_HUNTER_START = SKILL_COUNT
_LMS_INDEX = _BOUNTY_HUNTER_START + 2
_CLUES_START = _LMS_INDEX + 1
EXPECTED_TOKEN_COUNT = _CLUES_START + CLUE_COUNT

# Plain ASCII decimal integers; int() alone also takes "+5", "1_000" and " 7"
_FIELD_RE = re.compile(r"-?[0-9]+")


def _split_token(token: str, width: int, position: int) -> list[int]:
    fields = token.split(",")
    if len(fields) != width:
        raise MalformedScoreboardError(
            f"Token {position} ({token!r}) has {len(fields)} fields, expected {width}"
        )
    if not all(_FIELD_RE.fullmatch(f) for f in fields):
        raise MalformedScoreboardError(f"Token {position} ({token!r}) is not numeric")
    return [int(f) for f in fields]


def parse_skill_score(token: str, position: int = 0) -> SkillScore:
    rank, level, experience = _split_token(token, 3, position)
    try:
        return SkillScore(rank=rank, level=level, experience=experience)
    except ValidationError as e:
        raise MalformedScoreboardError(f"Token {position} ({token!r}) is out of range") from e


def parse_minigame_score(token: str, position: int = 0) -> MinigameScore:
    rank, score = _split_token(token, 2, position)
    try:
        return MinigameScore(rank=rank, score=score)
    except ValidationError as e:
        raise MalformedScoreboardError(f"Token {position} ({token!r}) is out of range") from e


def parse_scoreboard(raw: str) -> Scoreboard:
    """Decode a raw hiscore response into a Scoreboard.

    Raises:
        MalformedScoreboardError: fewer than 34 tokens or a token of the wrong shape
    """
    tokens = raw.split()
    if len(tokens) < EXPECTED_TOKEN_COUNT:
        raise MalformedScoreboardError(
            f"Expected {EXPECTED_TOKEN_COUNT} hiscore entries, got {len(tokens)}"
        )
    if len(tokens) > EXPECTED_TOKEN_COUNT:
        logger.debug(
            "Ignoring %d trailing hiscore entries", len(tokens) - EXPECTED_TOKEN_COUNT
        )

    skills = tuple(parse_skill_score(tokens[i], i) for i in range(SKILL_COUNT))
    clues = tuple(
        parse_minigame_score(tokens[i], i)
        for i in range(_CLUES_START, _CLUES_START + CLUE_COUNT)
    )

    return Scoreboard(
        skills=skills,
        bounty_hunter_hunter=parse_minigame_score(tokens[_BOUNTY_HUNTER_START], _BOUNTY_HUNTER_START),
        bounty_hunter_rogue=parse_minigame_score(
            tokens[_BOUNTY_HUNTER_START + 1], _BOUNTY_HUNTER_START + 1
        ),
        last_man_standing=parse_minigame_score(tokens[_LMS_INDEX], _LMS_INDEX),
        clues=clues,
    )
