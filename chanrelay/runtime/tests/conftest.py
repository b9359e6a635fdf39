"""Shared pytest fixtures for chanrelay.runtime tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from chanrelay.runtime.media.staging import MediaHandle
from chanrelay.runtime.session.protocol import Channel, Listener, SendOptions


class FakeSession:
    """In-memory ``ChannelSession`` that records every send."""

    def __init__(self, channels: list[Channel] | None = None) -> None:
        self.channels = channels if channels is not None else [
            Channel(id="c-1", name="Test Channel"),
            Channel(id="c-2", name="Announcements"),
        ]
        self.listeners: dict[str, list[Listener]] = {}
        self.sent: list[tuple[Channel, Any, SendOptions]] = []
        # (path, existed_at_send_time) for every file-backed handle
        self.seen_files: list[tuple[Path, bool]] = []
        self.send_error: Exception | None = None
        self.channels_error: Exception | None = None
        self.channel_calls = 0
        self.started = False
        self.stopped = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    def on(self, event: str, listener: Listener) -> None:
        self.listeners.setdefault(event, []).append(listener)

    def emit(self, event: str, *args: Any) -> None:
        for listener in self.listeners.get(event, []):
            listener(*args)

    async def get_channels(self) -> list[Channel]:
        self.channel_calls += 1
        if self.channels_error is not None:
            raise self.channels_error
        return list(self.channels)

    async def send_message(
        self,
        channel: Channel,
        content: str | MediaHandle,
        options: SendOptions,
    ) -> None:
        if isinstance(content, MediaHandle):
            self.seen_files.append((content.path, content.path.is_file()))
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((channel, content, options))


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setenv("CHANRELAY_DATA_DIR", str(data_dir))
    monkeypatch.setenv("DOTENV_PATH", str(tmp_path / ".env"))
    for key in ("PORT", "HOST", "RELAY_API_SECRET", "MAX_REQUEST_MB", "FFMPEG_PATH",
                "TRANSCODE_DIR", "VIDEO_MAX_WIDTH", "SESSION_FACTORY", "RELAY_URL"):
        monkeypatch.delenv(key, raising=False)
    return data_dir


@pytest.fixture(autouse=True)
def _reset_singletons(_isolate_data_dir: Path):
    from chanrelay.runtime.util.singletons import reset_all_singletons

    reset_all_singletons()
    yield
    reset_all_singletons()


@pytest.fixture()
def data_dir(_isolate_data_dir: Path) -> Path:
    return _isolate_data_dir


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()
