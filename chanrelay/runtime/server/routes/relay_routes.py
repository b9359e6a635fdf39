"""Relay API routes -- /health, /status, /channels, /send-message."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from aiohttp import web

from ...messaging.dispatcher import MessageDispatcher
from ...messaging.errors import NotReadyError
from ...session.state import SessionStateTracker

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=status)


class RelayRoutes:
    """HTTP surface of the relay; all sending goes through the dispatcher."""

    def __init__(self, tracker: SessionStateTracker, dispatcher: MessageDispatcher) -> None:
        self._tracker = tracker
        self._dispatcher = dispatcher

    def register(self, router: web.UrlDispatcher) -> None:
        router.add_get("/health", self.health)
        router.add_get("/status", self.status)
        router.add_get("/channels", self.channels)
        router.add_post("/send-message", self.send_message)

    async def health(self, _req: web.Request) -> web.Response:
        return web.json_response({
            "status": "ok",
            "whatsappReady": self._tracker.is_ready(),
            "timestamp": _timestamp(),
        })

    async def status(self, _req: web.Request) -> web.Response:
        return web.json_response({
            "ready": self._tracker.is_ready(),
            "timestamp": _timestamp(),
        })

    async def channels(self, _req: web.Request) -> web.Response:
        try:
            channels = await self._dispatcher.list_channels()
        except NotReadyError as exc:
            return _error(exc.message, exc.status)
        except Exception as exc:
            logger.error("[routes.channels] failed to fetch channels: %s", exc, exc_info=True)
            return _error(str(exc) or "Internal server error", 500)
        listing = [ch.to_dict() for ch in channels]
        return web.json_response({
            "success": True,
            "channels": listing,
            "count": len(listing),
        })

    async def send_message(self, req: web.Request) -> web.Response:
        if not self._tracker.is_ready():
            exc = NotReadyError()
            return _error(exc.message, exc.status)
        try:
            body = await req.json()
        except web.HTTPRequestEntityTooLarge:
            return _error("Request body too large", 413)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return _error("Request body must be valid JSON", 400)

        result = await self._dispatcher.send_json(body)
        payload = result.to_dict()
        payload["timestamp"] = _timestamp()
        return web.json_response(payload, status=result.status)
