"""Game mode resolution over the hiscore ledgers.

The hiscore service keeps a separate ledger per game mode and an ironman
account shows up on several of them (Normal, Ironman and possibly Hardcore or
Ultimate). There is no endpoint for "the player's actual mode", so the mode is
inferred by probing the ledgers in order:

1. Normal: every account has an entry; a miss means the player does not exist.
2. Ironman: a miss means a plain Normal account.
3. Hardcore and Ultimate, probed together. A refinement applies when its
   experience vector equals the Ironman one. Hardcore wins ties.

Only ModeMismatch is read as "ledger has no entry". Transport and parse
failures abort the resolution.

Note: a hardcore ironman who lost hardcore status keeps a stale Hardcore entry
whose experience no longer matches, so they resolve to Ironman. A Hardcore
ledger lagging behind the Ironman ledger produces the same outcome.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from enum import Enum

from hiscorebot.contracts.hiscores import GameMode, PlayerQuery, Scoreboard
from hiscorebot.core import metrics
from hiscorebot.core.errors import ModeMismatch
from hiscorebot.core.observability import trace_performance
from hiscorebot.core.ports import HiscoreAPIPort
from hiscorebot.core.scoreboard_parser import parse_scoreboard

logger = logging.getLogger(__name__)

# Order is the tie-break: earlier refinements win
REFINEMENT_PRECEDENCE: tuple[GameMode, ...] = (
    GameMode.HARDCORE_IRONMAN,
    GameMode.ULTIMATE_IRONMAN,
)


class ProbeStep(str, Enum):
    """States of the mode resolution cascade."""

    PROBE_NORMAL = "probe_normal"
    PROBE_IRONMAN = "probe_ironman"
    PROBE_REFINEMENTS = "probe_refinements"
    RESOLVED = "resolved"


def same_experience(a: Scoreboard, b: Scoreboard) -> bool:
    """Return True if both scoreboards describe the same account."""
    return a.experience_vector == b.experience_vector


def select_mode(
    ironman: Scoreboard,
    candidates: Sequence[tuple[GameMode, Scoreboard | None]],
) -> tuple[Scoreboard, GameMode]:
    """Pick the most specific ironman mode.

    Args:
        ironman: Scoreboard from the Ironman ledger
        candidates: Refinement modes in precedence order, with their scoreboard
            or None when the ledger has no entry

    Returns:
        The first candidate whose experience matches the Ironman entry, or the
        Ironman entry itself
    """
    for mode, scoreboard in candidates:
        if scoreboard is not None and same_experience(scoreboard, ironman):
            return scoreboard, mode
    return ironman, GameMode.IRONMAN


class HiscoreService:
    """Looks up hiscores and resolves a player's game mode."""

    def __init__(self, api: HiscoreAPIPort) -> None:
        self.api = api

    async def lookup_by_mode(self, player: str, mode: GameMode) -> Scoreboard:
        """Fetch and parse one ledger entry.

        Raises:
            ModeMismatch: player has no entry under ``mode``
            TransportError: service unreachable
            MalformedScoreboardError: unexpected response layout
        """
        query = PlayerQuery(player=player)
        raw = await self.api.fetch(query.player, mode)
        return parse_scoreboard(raw)

    async def _probe(self, player: str, mode: GameMode) -> Scoreboard | None:
        try:
            return await self.lookup_by_mode(player, mode)
        except ModeMismatch:
            logger.debug("No %s entry for %s", mode.display_name, player)
            return None

    async def _probe_refinements(
        self, player: str
    ) -> list[tuple[GameMode, Scoreboard | None]]:
        # Both probes complete before any error is raised, so nothing is left pending
        results = await asyncio.gather(
            *(self._probe(player, mode) for mode in REFINEMENT_PRECEDENCE),
            return_exceptions=True,
        )
        candidates: list[tuple[GameMode, Scoreboard | None]] = []
        for mode, result in zip(REFINEMENT_PRECEDENCE, results, strict=True):
            if isinstance(result, BaseException):
                raise result
            candidates.append((mode, result))
        return candidates

    @trace_performance(expected_errors=(ModeMismatch,))
    async def resolve(self, player: str) -> tuple[Scoreboard, GameMode]:
        """Return the scoreboard of the most specific mode the player belongs to.

        Raises:
            ModeMismatch: player has no Normal entry (player not found)
            TransportError: service unreachable during any probe
            MalformedScoreboardError: unexpected response layout during any probe
        """
        step = ProbeStep.PROBE_NORMAL
        logger.debug("Resolving %s: %s", player, step.value)
        normal = await self.lookup_by_mode(player, GameMode.NORMAL)

        step = ProbeStep.PROBE_IRONMAN
        logger.debug("Resolving %s: %s", player, step.value)
        ironman = await self._probe(player, GameMode.IRONMAN)
        if ironman is None:
            return self._resolved(player, normal, GameMode.NORMAL)

        step = ProbeStep.PROBE_REFINEMENTS
        logger.debug("Resolving %s: %s", player, step.value)
        candidates = await self._probe_refinements(player)
        scoreboard, mode = select_mode(ironman, candidates)
        return self._resolved(player, scoreboard, mode)

    def _resolved(
        self, player: str, scoreboard: Scoreboard, mode: GameMode
    ) -> tuple[Scoreboard, GameMode]:
        logger.debug("Resolving %s: %s", player, ProbeStep.RESOLVED.value)
        logger.info("Resolved %s as %s", player, mode.display_name)
        metrics.mark_resolution(mode.slug)
        return scoreboard, mode
