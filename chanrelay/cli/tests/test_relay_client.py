"""Tests for the relay HTTP client."""

from __future__ import annotations

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from chanrelay.cli.client import RelayClient, RelayClientError, text_payload


def _base(server: TestServer) -> str:
    return str(server.make_url(""))


class TestRelayClient:
    @pytest.mark.asyncio
    async def test_health(self, stub_relay) -> None:
        async with TestServer(stub_relay.build()) as server:
            async with RelayClient(_base(server)) as client:
                status, body = await client.health()
        assert status == 200
        assert body["status"] == "ok"
        assert stub_relay.auth_headers == [""]

    @pytest.mark.asyncio
    async def test_sends_bearer_secret(self, stub_relay) -> None:
        async with TestServer(stub_relay.build()) as server:
            async with RelayClient(_base(server), api_secret="s3cret") as client:
                await client.health()
        assert stub_relay.auth_headers == ["Bearer s3cret"]

    @pytest.mark.asyncio
    async def test_send_message_returns_error_status(self, stub_relay) -> None:
        stub_relay.send_status = 404
        async with TestServer(stub_relay.build()) as server:
            async with RelayClient(_base(server)) as client:
                status, body = await client.send_message(text_payload("Ghost", "hi"))
        assert status == 404
        assert body["success"] is False
        assert stub_relay.received == [{
            "channelName": "Ghost",
            "messageType": "text",
            "messageData": {"text": "hi"},
        }]

    @pytest.mark.asyncio
    async def test_non_json_response(self) -> None:
        async def plain(_req: web.Request) -> web.Response:
            return web.Response(text="<html>gateway error</html>", status=502)

        app = web.Application()
        app.router.add_get("/status", plain)
        async with TestServer(app) as server:
            async with RelayClient(_base(server)) as client:
                with pytest.raises(RelayClientError, match="non-JSON"):
                    await client.status()

    @pytest.mark.asyncio
    async def test_unreachable(self, unused_tcp_port: int) -> None:
        async with RelayClient(f"http://127.0.0.1:{unused_tcp_port}") as client:
            with pytest.raises(RelayClientError, match="failed"):
                await client.channels()

    @pytest.mark.asyncio
    async def test_requires_context(self) -> None:
        with pytest.raises(RelayClientError, match="async with"):
            await RelayClient("http://localhost:3000").health()
