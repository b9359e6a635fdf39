"""Validate, resolve, stage, and send -- one linear pass per request.

The dispatcher holds no state of its own.  It reads the session gate before
doing anything else, never retries, and releases staged media on every exit
path.
"""

from __future__ import annotations

import logging
import traceback
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..media.staging import MediaHandle, PayloadDecodeError, StagingStore
from ..session.protocol import Channel, ChannelSession, SendOptions
from ..session.state import SessionStateTracker
from .errors import (
    ChannelNotFoundError,
    DispatchFailure,
    NotReadyError,
    RelayError,
    RequestValidationError,
)
from .requests import InlineMedia, LocalMedia, MessageKind, SendRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    success: bool
    status: int
    message: str = ""
    error: str = ""
    detail: str | None = None
    channel: str = ""
    kind: str = ""

    @classmethod
    def sent(cls, channel: str, kind: str) -> DispatchResult:
        return cls(
            success=True,
            status=200,
            message=f"{kind} message sent successfully to {channel}",
            channel=channel,
            kind=kind,
        )

    @classmethod
    def failed(cls, exc: RelayError) -> DispatchResult:
        return cls(success=False, status=exc.status, error=exc.message, detail=exc.detail)

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "message": self.message}
        body: dict[str, Any] = {"success": False, "error": self.error}
        if self.detail:
            body["detail"] = self.detail
        return body


def match_channel(channels: list[Channel], name: str) -> Channel | None:
    """Case-insensitive exact name match; no fuzzy fallback."""
    wanted = name.casefold()
    return next((ch for ch in channels if (ch.name or "").casefold() == wanted), None)


class MessageDispatcher:

    def __init__(
        self,
        gate: SessionStateTracker,
        session: ChannelSession | None,
        staging: StagingStore,
    ) -> None:
        self._gate = gate
        self._session = session
        self._staging = staging

    @property
    def session(self) -> ChannelSession | None:
        return self._session

    async def send(self, request: SendRequest) -> DispatchResult:
        return await self._dispatch(request.validate)

    async def send_json(self, body: Any) -> DispatchResult:
        """Same as :meth:`send` for a raw ``/send-message`` body.

        The gate is checked before the body is even parsed.
        """
        return await self._dispatch(lambda: SendRequest.from_json(body))

    async def list_channels(self) -> list[Channel]:
        if not self._gate.is_ready():
            raise NotReadyError()
        return await self._require_session().get_channels()

    async def _dispatch(self, build: Callable[[], SendRequest]) -> DispatchResult:
        if not self._gate.is_ready():
            return DispatchResult.failed(NotReadyError())
        try:
            request = build()
            channel = await self._resolve(request.destination_name)
            logger.info(
                "[dispatch] sending %s message to channel %r ...",
                request.label, channel.name,
            )
            await self._deliver(channel, request)
        except RelayError as exc:
            if exc.status >= 500:
                logger.error("[dispatch] %s", exc.message)
            else:
                logger.info("[dispatch] rejected (%d): %s", exc.status, exc.message)
            return DispatchResult.failed(exc)
        except Exception as exc:
            logger.error("[dispatch] send failed: %s", exc, exc_info=True)
            return DispatchResult.failed(
                DispatchFailure(str(exc) or "Internal server error", detail=traceback.format_exc())
            )
        logger.info("[dispatch] sent %s message to %r", request.label, request.destination_name)
        return DispatchResult.sent(request.destination_name, request.label)

    def _require_session(self) -> ChannelSession:
        if self._session is None:
            raise DispatchFailure("No messaging session is configured")
        return self._session

    async def _resolve(self, name: str) -> Channel:
        channels = await self._require_session().get_channels()
        channel = match_channel(channels, name)
        if channel is None:
            raise ChannelNotFoundError(name)
        return channel

    async def _deliver(self, channel: Channel, request: SendRequest) -> None:
        session = self._require_session()
        if request.kind is MessageKind.text:
            assert isinstance(request.payload, str)
            await session.send_message(channel, request.payload, SendOptions())
            return

        options = self._media_options(request)
        payload = request.payload
        if isinstance(payload, LocalMedia):
            handle = MediaHandle.from_path(payload.path, payload.mimetype)
            await session.send_message(channel, handle, options)
            return

        assert isinstance(payload, InlineMedia)
        try:
            async with self._staging.staged(payload.data, payload.mimetype, payload.filename) as handle:
                await session.send_message(channel, handle, options)
        except PayloadDecodeError as exc:
            raise RequestValidationError(str(exc)) from exc

    @staticmethod
    def _media_options(request: SendRequest) -> SendOptions:
        if request.kind is MessageKind.audio:
            return SendOptions(send_audio_as_voice=request.as_voice_note)
        return SendOptions(caption=request.caption or "")
