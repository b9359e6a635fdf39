"""Minimal aiohttp client for the relay HTTP API."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

import aiohttp

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = aiohttp.ClientTimeout(total=300)


class RelayClientError(RuntimeError):
    """The relay could not be reached or returned a non-JSON body."""


class RelayClient:
    """Async context manager wrapping one ``aiohttp.ClientSession``.

    Every call returns ``(http_status, json_body)``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_secret: str = "",
        timeout: aiohttp.ClientTimeout = _DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {api_secret}"} if api_secret else {}
        self._timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> RelayClient:
        self._session = aiohttp.ClientSession(headers=self._headers, timeout=self._timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def _request(
        self,
        method: str,
        path: str,
        payload: dict[str, Any] | None = None,
    ) -> tuple[int, dict[str, Any]]:
        if self._session is None:
            raise RelayClientError("RelayClient used outside 'async with'")
        url = f"{self.base_url}{path}"
        logger.debug("[client] %s %s", method, url)
        try:
            async with self._session.request(method, url, json=payload) as resp:
                try:
                    body = await resp.json(content_type=None)
                except ValueError:
                    text = await resp.text()
                    raise RelayClientError(
                        f"{method} {path} returned non-JSON ({resp.status}): {text[:200]}"
                    ) from None
                return resp.status, body if isinstance(body, dict) else {"data": body}
        except aiohttp.ClientError as exc:
            raise RelayClientError(f"{method} {url} failed: {exc}") from exc

    async def health(self) -> tuple[int, dict[str, Any]]:
        return await self._request("GET", "/health")

    async def status(self) -> tuple[int, dict[str, Any]]:
        return await self._request("GET", "/status")

    async def channels(self) -> tuple[int, dict[str, Any]]:
        return await self._request("GET", "/channels")

    async def send_message(self, payload: dict[str, Any]) -> tuple[int, dict[str, Any]]:
        return await self._request("POST", "/send-message", payload)


def text_payload(channel_name: str, text: str) -> dict[str, Any]:
    return {
        "channelName": channel_name,
        "messageType": "text",
        "messageData": {"text": text},
    }
