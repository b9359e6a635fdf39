"""Shared pytest fixtures for chanrelay.cli tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from aiohttp import web


class StubRelay:
    """Tiny stand-in for the relay server that records POSTed bodies."""

    def __init__(self) -> None:
        self.received: list[dict[str, Any]] = []
        self.auth_headers: list[str] = []
        self.send_status = 200
        self.channels = [{"id": "c-1", "name": "Test Channel"}]

    def build(self) -> web.Application:
        app = web.Application(client_max_size=64 * 1024 * 1024)
        app.router.add_get("/health", self._health)
        app.router.add_get("/status", self._status)
        app.router.add_get("/channels", self._channels)
        app.router.add_post("/send-message", self._send)
        return app

    async def _health(self, req: web.Request) -> web.Response:
        self.auth_headers.append(req.headers.get("Authorization", ""))
        return web.json_response({"status": "ok", "whatsappReady": True, "timestamp": "t"})

    async def _status(self, _req: web.Request) -> web.Response:
        return web.json_response({"ready": True, "timestamp": "t"})

    async def _channels(self, _req: web.Request) -> web.Response:
        return web.json_response({"success": True, "channels": self.channels, "count": len(self.channels)})

    async def _send(self, req: web.Request) -> web.Response:
        body = await req.json()
        self.received.append(body)
        if self.send_status != 200:
            return web.json_response(
                {"success": False, "error": f'Channel "{body.get("channelName")}" not found.'},
                status=self.send_status,
            )
        return web.json_response({
            "success": True,
            "message": f"{body['messageType']} message sent successfully to {body['channelName']}",
        })


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setenv("CHANRELAY_DATA_DIR", str(data_dir))
    monkeypatch.setenv("DOTENV_PATH", str(tmp_path / ".env"))
    for key in ("RELAY_API_SECRET", "RELAY_URL", "FFMPEG_PATH", "TRANSCODE_DIR"):
        monkeypatch.delenv(key, raising=False)
    return data_dir


@pytest.fixture(autouse=True)
def _reset_singletons(_isolate_data_dir: Path):
    from chanrelay.runtime.util.singletons import reset_all_singletons

    reset_all_singletons()
    yield
    reset_all_singletons()


@pytest.fixture()
def stub_relay() -> StubRelay:
    return StubRelay()
