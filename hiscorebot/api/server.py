"""REST API server (aiohttp).

Endpoints:
- GET|HEAD /                              → Liveness heartbeat ("ok")
- GET /metrics                            → Prometheus exposition
- GET /hiscorebot/channel/{channel}       → Channel record
- POST /hiscorebot/channel/{channel}      → Add a channel
- POST /hiscorebot/connect/{channel}      → Connect the bot to a channel
- DELETE /hiscorebot/connect/{channel}    → Disconnect the bot from a channel
- GET /hiscorebot/hiscores/{player}       → Resolved hiscores (?mode= pins a mode)

Errors are JSON objects with a single "message" key.
"""

import logging
from typing import Any

from aiohttp import web
from pydantic import ValidationError

from hiscorebot.contracts import CLUE_NAMES, SKILL_NAMES, GameMode, Scoreboard
from hiscorebot.core.errors import (
    ChannelAlreadyExistsError,
    ChannelNotFoundError,
    HiscoreError,
    ModeMismatch,
)
from hiscorebot.core.metrics import render_latest
from hiscorebot.core.observability import trace_wrapper
from hiscorebot.core.services.channel_service import ChannelService
from hiscorebot.core.services.hiscore_service import HiscoreService

logger = logging.getLogger(__name__)


def json_error(message: Any, status: int) -> web.Response:
    """JSON counterpart of a plain-text HTTP error."""
    return web.json_response({"message": str(message)}, status=status)


def scoreboard_payload(player: str, scoreboard: Scoreboard, mode: GameMode) -> dict[str, Any]:
    return {
        "player": player,
        "mode": mode.display_name,
        "skills": {
            name: score.model_dump() for name, score in zip(SKILL_NAMES, scoreboard.skills, strict=True)
        },
        "bountyHunter": {
            "hunter": scoreboard.bounty_hunter_hunter.model_dump(),
            "rogue": scoreboard.bounty_hunter_rogue.model_dump(),
        },
        "lastManStanding": scoreboard.last_man_standing.model_dump(),
        "clues": {
            name: score.model_dump() for name, score in zip(CLUE_NAMES, scoreboard.clues, strict=True)
        },
    }


class HiscoreAPIServer:
    """HTTP façade over channel management and hiscore lookups."""

    def __init__(self, channels: ChannelService, hiscores: HiscoreService) -> None:
        self.channels = channels
        self.hiscores = hiscores
        self.app = web.Application()
        self._runner: web.AppRunner | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        # Health check for load balancer; add_get also registers HEAD
        self.app.router.add_get("/", self.heartbeat)
        self.app.router.add_get("/metrics", self.metrics)

        self.app.router.add_get("/hiscorebot/channel/{channel}", self.get_channel)
        self.app.router.add_post("/hiscorebot/channel/{channel}", self.add_channel)
        self.app.router.add_post("/hiscorebot/connect/{channel}", self.connect_channel)
        self.app.router.add_delete("/hiscorebot/connect/{channel}", self.disconnect_channel)
        self.app.router.add_get("/hiscorebot/hiscores/{player}", self.get_hiscores)

    async def heartbeat(self, request: web.Request) -> web.Response:
        return web.Response(text="ok", content_type="text/plain")

    async def metrics(self, request: web.Request) -> web.Response:
        payload, content_type = render_latest()
        return web.Response(body=payload, headers={"Content-Type": content_type})

    async def get_channel(self, request: web.Request) -> web.Response:
        name = request.match_info["channel"]
        try:
            channel = await self.channels.get_channel(name)
        except ChannelNotFoundError as e:
            return json_error(e, 404)
        return web.json_response(channel.model_dump(by_alias=True))

    async def add_channel(self, request: web.Request) -> web.Response:
        name = request.match_info["channel"]
        try:
            channel = await self.channels.add_channel(name)
        except ChannelAlreadyExistsError as e:
            return json_error(e, 409)
        return web.json_response(channel.model_dump(by_alias=True), status=201)

    async def connect_channel(self, request: web.Request) -> web.Response:
        try:
            await self.channels.connect_to_channel(request.match_info["channel"])
        except ChannelNotFoundError as e:
            return json_error(e, 404)
        return web.Response(status=204)

    async def disconnect_channel(self, request: web.Request) -> web.Response:
        try:
            await self.channels.disconnect_from_channel(request.match_info["channel"])
        except ChannelNotFoundError as e:
            return json_error(e, 404)
        return web.Response(status=204)

    @trace_wrapper(
        capture_result=False,
        capture_args=False,
        log_level="INFO",
        add_metadata={"endpoint": "/hiscorebot/hiscores"},
        warn_over_ms=2000,
    )
    async def get_hiscores(self, request: web.Request) -> web.Response:
        player = request.match_info["player"]
        mode_slug = request.query.get("mode")
        pinned: GameMode | None = None
        if mode_slug:
            try:
                pinned = GameMode.from_slug(mode_slug)
            except ValueError as e:
                return json_error(e, 400)
        try:
            if pinned is not None:
                mode = pinned
                scoreboard = await self.hiscores.lookup_by_mode(player, mode)
            else:
                scoreboard, mode = await self.hiscores.resolve(player)
        except ValidationError:
            return json_error(f"Invalid player name: {player}", 400)
        except ModeMismatch as e:
            return json_error(e, 404)
        except HiscoreError as e:
            logger.warning("Hiscore lookup for %s failed: %s", player, e)
            return json_error(e, 502)
        return web.json_response(scoreboard_payload(player, scoreboard, mode))

    async def start(self, host: str = "0.0.0.0", port: int = 7373) -> None:
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, host, port)
        await site.start()
        logger.info("REST API listening on %s:%d", host, port)

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
