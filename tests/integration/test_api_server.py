"""REST API server routes with in-memory services."""

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web

from hiscorebot.api.server import HiscoreAPIServer
from hiscorebot.contracts import Channel, GameMode
from hiscorebot.core.errors import (
    ChannelAlreadyExistsError,
    ChannelNotFoundError,
    MalformedScoreboardError,
    TransportError,
)
from hiscorebot.core.services.hiscore_service import HiscoreService


@pytest.fixture
def channels() -> MagicMock:
    service = MagicMock()
    service.get_channel = AsyncMock(return_value=Channel(name="42", is_connected=True, rsn="Zezima"))
    service.add_channel = AsyncMock(return_value=Channel(name="42"))
    service.connect_to_channel = AsyncMock(return_value=Channel(name="42", is_connected=True))
    service.disconnect_from_channel = AsyncMock(return_value=Channel(name="42"))
    return service


@pytest.fixture
def api(fake_api_factory, raw_factory):
    raw = raw_factory()
    return fake_api_factory(
        {
            GameMode.NORMAL: {"Zezima": raw, "Hardcore": raw},
            GameMode.IRONMAN: {"Hardcore": raw},
            GameMode.HARDCORE_IRONMAN: {
                "Hardcore": raw,
                "Broken": TransportError("Broken", GameMode.HARDCORE_IRONMAN, "timeout"),
            },
            GameMode.ULTIMATE_IRONMAN: {"Garbled": MalformedScoreboardError("not valid text")},
        }
    )


@pytest_asyncio.fixture
async def base_url(channels, api) -> AsyncIterator[str]:
    server = HiscoreAPIServer(channels, HiscoreService(api))
    runner = web.AppRunner(server.app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = site._server.sockets[0].getsockname()[1]
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()


@pytest.mark.asyncio
async def test_heartbeat(base_url) -> None:
    async with aiohttp.ClientSession() as s:
        async with s.get(f"{base_url}/") as resp:
            assert resp.status == 200
            assert await resp.text() == "ok"


@pytest.mark.asyncio
async def test_get_channel(base_url, channels) -> None:
    async with aiohttp.ClientSession() as s:
        async with s.get(f"{base_url}/hiscorebot/channel/42") as resp:
            assert resp.status == 200
            assert await resp.json() == {"name": "42", "isConnected": True, "rsn": "Zezima"}

        channels.get_channel.side_effect = ChannelNotFoundError("43")
        async with s.get(f"{base_url}/hiscorebot/channel/43") as resp:
            assert resp.status == 404
            assert await resp.json() == {"message": "Channel 43 not found"}


@pytest.mark.asyncio
async def test_add_channel(base_url, channels) -> None:
    async with aiohttp.ClientSession() as s:
        async with s.post(f"{base_url}/hiscorebot/channel/42") as resp:
            assert resp.status == 201
            assert (await resp.json())["isConnected"] is False

        channels.add_channel.side_effect = ChannelAlreadyExistsError("42")
        async with s.post(f"{base_url}/hiscorebot/channel/42") as resp:
            assert resp.status == 409


@pytest.mark.asyncio
async def test_connect_and_disconnect(base_url, channels) -> None:
    async with aiohttp.ClientSession() as s:
        async with s.post(f"{base_url}/hiscorebot/connect/42") as resp:
            assert resp.status == 204
        async with s.delete(f"{base_url}/hiscorebot/connect/42") as resp:
            assert resp.status == 204

        channels.connect_to_channel.side_effect = ChannelNotFoundError("43")
        async with s.post(f"{base_url}/hiscorebot/connect/43") as resp:
            assert resp.status == 404

    channels.connect_to_channel.assert_any_await("42")
    channels.disconnect_from_channel.assert_awaited_once_with("42")


@pytest.mark.asyncio
async def test_hiscores_resolves_mode(base_url) -> None:
    async with aiohttp.ClientSession() as s:
        async with s.get(f"{base_url}/hiscorebot/hiscores/Hardcore") as resp:
            assert resp.status == 200
            payload = await resp.json()

    assert payload["mode"] == "Hardcore Ironman"
    assert payload["skills"]["Ranged"] == {"rank": 342695, "level": 90, "experience": 5866885}
    assert payload["lastManStanding"] == {"rank": 3308, "score": 992}
    assert payload["clues"]["Master"] == {"rank": -1, "score": -1}
    assert len(payload["skills"]) == 24


@pytest.mark.asyncio
async def test_hiscores_pinned_mode(base_url) -> None:
    async with aiohttp.ClientSession() as s:
        async with s.get(f"{base_url}/hiscorebot/hiscores/Hardcore?mode=ironman") as resp:
            assert resp.status == 200
            assert (await resp.json())["mode"] == "Ironman"

        async with s.get(f"{base_url}/hiscorebot/hiscores/Zezima?mode=ironman") as resp:
            assert resp.status == 404
            assert (await resp.json())["message"] == "Zezima is not a(n) Ironman account"

        async with s.get(f"{base_url}/hiscorebot/hiscores/Zezima?mode=deadman") as resp:
            assert resp.status == 400


@pytest.mark.asyncio
async def test_hiscores_error_mapping(base_url) -> None:
    async with aiohttp.ClientSession() as s:
        async with s.get(f"{base_url}/hiscorebot/hiscores/Nobody") as resp:
            assert resp.status == 404

        async with s.get(f"{base_url}/hiscorebot/hiscores/{'x' * 13}") as resp:
            assert resp.status == 400

        async with s.get(f"{base_url}/hiscorebot/hiscores/Broken?mode=hardcore") as resp:
            assert resp.status == 502

        async with s.get(f"{base_url}/hiscorebot/hiscores/Garbled?mode=uim") as resp:
            assert resp.status == 502
            assert (await resp.json())["message"] == "not valid text"


@pytest.mark.asyncio
async def test_metrics_exposition(base_url) -> None:
    async with aiohttp.ClientSession() as s:
        async with s.get(f"{base_url}/hiscorebot/hiscores/Zezima") as resp:
            assert resp.status == 200
        async with s.get(f"{base_url}/metrics") as resp:
            assert resp.status == 200
            text = await resp.text()

    assert "hiscore_resolutions_total" in text
