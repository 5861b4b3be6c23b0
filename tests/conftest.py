"""Shared fixtures for hiscorebot tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from hiscorebot.contracts import GameMode
from hiscorebot.core.errors import ModeMismatch
from hiscorebot.core.ports import HiscoreAPIPort

SAMPLE_ENTRIES: list[str] = [
    "1140740,922,26362111",  # Skills start here
    "1600556,50,102080",
    "-1,1,0",
    "396686,90,5595374",
    "505273,86,3732405",
    "342695,90,5866885",
    "1170583,45,61571",
    "157706,96,10156589",
    "1721877,41,43025",
    "-1,36,26525",
    "1486638,27,10509",
    "-1,18,3597",
    "1101979,50,102330",
    "1946033,28,11634",
    "1875902,30,13743",
    "1997814,32,16889",
    "1315071,17,3195",
    "1544271,32,18238",
    "692214,53,138166",
    "1490078,23,6530",
    "1150078,10,1180",
    "-1,1,0",
    "-1,1,0",
    "329760,65,451646",
    "5106,661",  # Bounty Hunter starts here
    "30275,36",
    "3308,992",  # LMS
    "-1,-1",  # Clues start here
    "-1,-1",
    "-1,-1",
    "-1,-1",
    "-1,-1",
    "-1,-1",
    "-1,-1",
]


def make_raw(overall_exp: int | None = None) -> str:
    """Sample hiscore body, optionally with a different Overall experience."""
    entries = list(SAMPLE_ENTRIES)
    if overall_exp is not None:
        rank, level, _ = entries[0].split(",")
        entries[0] = f"{rank},{level},{overall_exp}"
    return "\n".join(entries) + "\n"


class FakeHiscoreAPI(HiscoreAPIPort):
    """In-memory hiscore service.

    ``ledgers`` maps a game mode to {player: raw body or exception}. Players
    missing from a ledger get ModeMismatch, like a 404 from the real service.
    """

    def __init__(self, ledgers: dict[GameMode, dict[str, str | Exception]]) -> None:
        self.ledgers = ledgers
        self.calls: list[tuple[str, GameMode]] = []

    async def fetch(self, player: str, mode: GameMode) -> str:
        self.calls.append((player, mode))
        entry = self.ledgers.get(mode, {}).get(player)
        if entry is None:
            raise ModeMismatch(player, mode, status_code=404)
        if isinstance(entry, Exception):
            raise entry
        return entry

    def modes_called(self) -> list[GameMode]:
        return [mode for _, mode in self.calls]


@pytest.fixture
def sample_raw() -> str:
    return make_raw()


@pytest.fixture
def fake_api_factory() -> Callable[..., FakeHiscoreAPI]:
    return FakeHiscoreAPI


@pytest.fixture
def raw_factory() -> Callable[..., str]:
    return make_raw
