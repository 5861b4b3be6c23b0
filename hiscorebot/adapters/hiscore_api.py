"""OSRS hiscore API adapter (aiohttp).

Issues one GET per (player, game mode) against ``index_lite.ws`` and returns
the raw body. Implements HiscoreAPIPort with session reuse per event loop.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any
from urllib.parse import quote

import aiohttp

from hiscorebot.config.settings import get_settings
from hiscorebot.contracts import GameMode
from hiscorebot.core import metrics
from hiscorebot.core.errors import MalformedScoreboardError, ModeMismatch, TransportError
from hiscorebot.core.observability import trace_adapter
from hiscorebot.core.ports import HiscoreAPIPort

logger = logging.getLogger(__name__)


def format_hiscore_url(player: str, mode: GameMode, base_url: str | None = None) -> str:
    """Build the ``index_lite.ws`` URL for a player under a game mode."""
    base = (base_url or get_settings().hiscore_base_url).rstrip("/")
    return f"{base}/m=hiscore_oldschool{mode.url_suffix}/index_lite.ws?player={quote(player)}"


class HiscoreAPIAdapter(HiscoreAPIPort):
    def __init__(self, base_url: str | None = None, timeout_seconds: float | None = None) -> None:
        settings = get_settings()
        self.base_url = base_url or settings.hiscore_base_url
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.hiscore_timeout_seconds
        )
        self._session: Any | None = None
        self._session_loop: asyncio.AbstractEventLoop | None = None
        logger.info("Hiscore API adapter initialized for %s", self.base_url)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        loop = asyncio.get_running_loop()
        needs_new_session = (
            self._session is None
            or self._session.closed
            or self._session_loop is not loop
        )
        if needs_new_session:
            if self._session is not None and not self._session.closed:
                await self._session.close()
            kwargs: dict[str, Any] = {}
            if self.timeout_seconds is not None:
                kwargs["timeout"] = aiohttp.ClientTimeout(total=self.timeout_seconds)
            self._session = aiohttp.ClientSession(**kwargs)
            self._session_loop = loop
        return self._session

    async def close(self) -> None:
        try:
            if self._session is not None and not self._session.closed:
                await self._session.close()
        finally:
            self._session = None
            self._session_loop = None

    @trace_adapter(expected_errors=(ModeMismatch,))
    async def fetch(self, player: str, mode: GameMode) -> str:
        url = format_hiscore_url(player, mode, self.base_url)
        started = time.perf_counter()
        try:
            session = await self._ensure_session()
            async with session.get(url) as resp:
                # Any status but 200 means no entry under this mode
                if resp.status != 200:
                    metrics.mark_fetch(mode.slug, "mode_mismatch", time.perf_counter() - started)
                    raise ModeMismatch(player, mode, status_code=resp.status)
                try:
                    body = await resp.text()
                except UnicodeDecodeError as e:
                    metrics.mark_fetch(mode.slug, "malformed", time.perf_counter() - started)
                    raise MalformedScoreboardError(
                        f"Hiscore response for {player} ({mode.display_name}) is not valid text"
                    ) from e
        except (aiohttp.ClientError, TimeoutError) as e:
            metrics.mark_fetch(mode.slug, "transport_error")
            logger.error("Hiscore request failed for %s (%s): %s", player, mode.display_name, e)
            raise TransportError(player, mode, str(e) or type(e).__name__) from e

        metrics.mark_fetch(mode.slug, "ok", time.perf_counter() - started)
        return body
