"""Interface of the external messaging session the relay dispatches through."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from ..media.staging import MediaHandle

EVENT_QR = "qr"
EVENT_READY = "ready"
EVENT_AUTH_FAILURE = "auth_failure"
EVENT_DISCONNECTED = "disconnected"

LIFECYCLE_EVENTS = (EVENT_QR, EVENT_READY, EVENT_AUTH_FAILURE, EVENT_DISCONNECTED)

Listener = Callable[..., Awaitable[None] | None]


@dataclass(frozen=True)
class Channel:
    id: str
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class SendOptions:
    caption: str | None = None
    send_audio_as_voice: bool = False


@runtime_checkable
class ChannelSession(Protocol):
    """Authenticated, persistent connection to the messaging network.

    Implementations emit ``qr`` (with the login challenge), ``ready``,
    ``auth_failure`` (with a message) and ``disconnected`` (with a reason)
    to listeners registered through :meth:`on`.
    """

    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    def on(self, event: str, listener: Listener) -> None: ...

    async def get_channels(self) -> list[Channel]: ...

    async def send_message(
        self,
        channel: Channel,
        content: str | MediaHandle,
        options: SendOptions,
    ) -> None: ...


SessionFactory = Callable[[Any], ChannelSession]
