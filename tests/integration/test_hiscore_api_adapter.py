"""HiscoreAPIAdapter against a local stub of the hiscore service."""

import asyncio

import pytest
from aiohttp import web
from structlog.testing import capture_logs

from hiscorebot.adapters.hiscore_api import HiscoreAPIAdapter, format_hiscore_url
from hiscorebot.contracts import GameMode
from hiscorebot.core.errors import MalformedScoreboardError, ModeMismatch, TransportError
from hiscorebot.core.scoreboard_parser import parse_scoreboard


async def _start_stub(app: web.Application) -> tuple[web.AppRunner, str]:
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = site._server.sockets[0].getsockname()[1]
    return runner, f"http://127.0.0.1:{port}"


def _stub_app(ledgers: dict[str, dict[str, str]], requests: list[tuple[str, str]]) -> web.Application:
    async def _index_lite(request: web.Request) -> web.Response:
        ledger = request.match_info["ledger"]
        player = request.query.get("player", "")
        requests.append((ledger, player))
        body = ledgers.get(ledger, {}).get(player)
        if body is None:
            return web.Response(status=404, text="<html>Not found</html>")
        return web.Response(text=body)

    app = web.Application()
    app.router.add_get("/{ledger}/index_lite.ws", _index_lite)
    return app


def test_format_hiscore_url() -> None:
    base = "https://secure.runescape.com"

    assert format_hiscore_url("Zezima", GameMode.NORMAL, base) == (
        "https://secure.runescape.com/m=hiscore_oldschool/index_lite.ws?player=Zezima"
    )
    assert format_hiscore_url("Lynx Titan", GameMode.HARDCORE_IRONMAN, base + "/") == (
        "https://secure.runescape.com/m=hiscore_oldschool_hardcore_ironman/index_lite.ws"
        "?player=Lynx%20Titan"
    )
    assert "/m=hiscore_oldschool_ultimate/" in format_hiscore_url("x", GameMode.ULTIMATE_IRONMAN, base)


@pytest.mark.asyncio
async def test_fetch_returns_body(sample_raw) -> None:
    requests: list[tuple[str, str]] = []
    runner, base_url = await _start_stub(
        _stub_app({"m=hiscore_oldschool_ironman": {"Lynx Titan": sample_raw}}, requests)
    )
    adapter = HiscoreAPIAdapter(base_url=base_url)
    try:
        body = await adapter.fetch("Lynx Titan", GameMode.IRONMAN)
    finally:
        await adapter.close()
        await runner.cleanup()

    assert parse_scoreboard(body) == parse_scoreboard(sample_raw)
    assert requests == [("m=hiscore_oldschool_ironman", "Lynx Titan")]


@pytest.mark.asyncio
async def test_non_200_is_mode_mismatch(sample_raw) -> None:
    requests: list[tuple[str, str]] = []
    runner, base_url = await _start_stub(
        _stub_app({"m=hiscore_oldschool": {"Zezima": sample_raw}}, requests)
    )
    adapter = HiscoreAPIAdapter(base_url=base_url)
    try:
        with pytest.raises(ModeMismatch) as exc_info:
            await adapter.fetch("Zezima", GameMode.ULTIMATE_IRONMAN)
    finally:
        await adapter.close()
        await runner.cleanup()

    assert exc_info.value.status_code == 404
    assert exc_info.value.mode is GameMode.ULTIMATE_IRONMAN
    assert str(exc_info.value) == "Zezima is not a(n) Ultimate Ironman account"


@pytest.mark.asyncio
async def test_connection_refused_is_transport_error() -> None:
    # Grab a free port, then release it so nothing is listening
    runner, base_url = await _start_stub(web.Application())
    await runner.cleanup()

    adapter = HiscoreAPIAdapter(base_url=base_url)
    try:
        with pytest.raises(TransportError) as exc_info:
            await adapter.fetch("Zezima", GameMode.NORMAL)
    finally:
        await adapter.close()

    assert exc_info.value.mode is GameMode.NORMAL
    assert exc_info.value.__cause__ is not None


@pytest.mark.asyncio
async def test_timeout_is_transport_error() -> None:
    async def _slow(request: web.Request) -> web.Response:
        await asyncio.sleep(1)
        return web.Response(text="")

    app = web.Application()
    app.router.add_get("/{ledger}/index_lite.ws", _slow)
    runner, base_url = await _start_stub(app)
    adapter = HiscoreAPIAdapter(base_url=base_url, timeout_seconds=0.1)
    try:
        with pytest.raises(TransportError):
            await adapter.fetch("Zezima", GameMode.NORMAL)
    finally:
        await adapter.close()
        await runner.cleanup()


@pytest.mark.asyncio
async def test_session_is_reused(sample_raw) -> None:
    requests: list[tuple[str, str]] = []
    runner, base_url = await _start_stub(
        _stub_app({"m=hiscore_oldschool": {"Zezima": sample_raw}}, requests)
    )
    adapter = HiscoreAPIAdapter(base_url=base_url)
    try:
        await adapter.fetch("Zezima", GameMode.NORMAL)
        session = adapter._session
        await adapter.fetch("Zezima", GameMode.NORMAL)
        assert adapter._session is session
    finally:
        await adapter.close()
        await runner.cleanup()

    assert adapter._session is None
    assert len(requests) == 2


@pytest.mark.asyncio
async def test_undecodable_body_is_malformed() -> None:
    async def _garbled(request: web.Request) -> web.Response:
        return web.Response(body=b"\xff\xfe\xfa 1,2,3", content_type="text/plain", charset="utf-8")

    app = web.Application()
    app.router.add_get("/{ledger}/index_lite.ws", _garbled)
    runner, base_url = await _start_stub(app)
    adapter = HiscoreAPIAdapter(base_url=base_url)
    try:
        with pytest.raises(MalformedScoreboardError) as exc_info:
            await adapter.fetch("Zezima", GameMode.NORMAL)
    finally:
        await adapter.close()
        await runner.cleanup()

    assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


@pytest.mark.asyncio
async def test_mode_mismatch_is_not_logged_as_error() -> None:
    runner, base_url = await _start_stub(_stub_app({}, []))
    adapter = HiscoreAPIAdapter(base_url=base_url)
    try:
        with capture_logs() as cap:
            with pytest.raises(ModeMismatch):
                await adapter.fetch("Zezima", GameMode.IRONMAN)
    finally:
        await adapter.close()
        await runner.cleanup()

    assert cap
    assert all(e["log_level"] != "error" for e in cap)
