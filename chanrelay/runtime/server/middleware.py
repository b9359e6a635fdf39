"""HTTP middleware -- optional bearer auth and a quiet access logger."""

from __future__ import annotations

import hmac
import logging

from aiohttp import web
from aiohttp.abc import AbstractAccessLogger

logger = logging.getLogger(__name__)

SETTINGS_KEY = "settings"

_QUIET_PATHS = frozenset({"/health", "/status"})
_PUBLIC_PATHS = frozenset({"/health"})


class QuietAccessLogger(AbstractAccessLogger):
    """Demotes polling-endpoint and not-ready log entries to DEBUG."""

    def log(self, request: web.BaseRequest, response: web.StreamResponse, time: float) -> None:
        status = response.status
        if request.path in _QUIET_PATHS or status in (401, 503):
            level = logging.DEBUG
        else:
            level = logging.INFO
        self.logger.log(
            level,
            "%s %s %s %s %.3fs",
            request.remote,
            request.method,
            request.path,
            status,
            time,
        )


@web.middleware
async def auth_middleware(request: web.Request, handler):  # type: ignore[type-arg]
    """Require ``Authorization: Bearer <RELAY_API_SECRET>`` when a secret is set."""
    settings = request.app.get(SETTINGS_KEY)
    secret = settings.api_secret if settings is not None else ""
    if not secret or request.path in _PUBLIC_PATHS:
        return await handler(request)

    auth = request.headers.get("Authorization", "")
    if hmac.compare_digest(auth, f"Bearer {secret}"):
        return await handler(request)

    return web.json_response(
        {"success": False, "error": "Invalid or missing API secret"},
        status=401,
    )
