"""Scratch-space staging for decoded media payloads.

Inline payloads arrive as base64 inside JSON bodies.  Rather than hand a
multi-megabyte string to the session, the payload is decoded to a uniquely
named file under the staging directory and the session receives a
:class:`MediaHandle` pointing at it.  Every staged file is released on every
exit path via :meth:`StagingStore.staged`.
"""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import os
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from ..util.async_helpers import run_sync

logger = logging.getLogger(__name__)

_DATA_URL_MARKER = ";base64,"
_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


class PayloadDecodeError(ValueError):
    """Raised when an inline payload is not valid base64."""


@dataclass(frozen=True)
class MediaHandle:
    """Reference to a file on disk ready for transmission.

    A handle never owns its file; whoever created it is responsible for
    releasing it.
    """

    mimetype: str
    filename: str
    path: Path

    @classmethod
    def from_path(cls, path: Path, mimetype: str, filename: str | None = None) -> MediaHandle:
        return cls(mimetype=mimetype, filename=filename or path.name, path=path)


def decode_payload(payload: bytes | str) -> bytes:
    """Return raw bytes for *payload*.

    ``bytes`` pass through untouched.  Strings are base64-decoded; an optional
    ``data:<mime>;base64,`` prefix, embedded whitespace, the URL-safe alphabet
    and missing ``=`` padding are tolerated.  Any other character is rejected.
    """
    if isinstance(payload, bytes):
        return payload
    text = payload.strip()
    if text.startswith("data:") and _DATA_URL_MARKER in text:
        text = text.split(_DATA_URL_MARKER, 1)[1]
    text = "".join(text.split()).translate(_URLSAFE_TO_STANDARD)
    text += "=" * (-len(text) % 4)
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise PayloadDecodeError(f"Payload is not valid base64: {exc}") from None


def _safe_name(suggested: str | None) -> str:
    name = Path(suggested).name if suggested else ""
    if not name or name in (".", ".."):
        name = f"media_{int(time.time() * 1000)}"
    return f"{uuid.uuid4().hex[:8]}_{name}"


def _write_atomic(path: Path, data: bytes) -> None:
    tmp = path.with_name(f".{path.name}.part")
    try:
        tmp.write_bytes(data)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


class StagingStore:
    """Owns every file it writes under ``root``."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def _reserve(self, suggested_name: str | None) -> Path:
        return self._root / _safe_name(suggested_name)

    def _write(self, path: Path, payload: bytes | str) -> int:
        data = decode_payload(payload)
        self._root.mkdir(parents=True, exist_ok=True)
        _write_atomic(path, data)
        return len(data)

    def _handle(self, path: Path, mimetype: str, suggested_name: str | None) -> MediaHandle:
        filename = Path(suggested_name).name if suggested_name else path.name
        return MediaHandle.from_path(path, mimetype, filename=filename)

    async def stage(
        self,
        payload: bytes | str,
        mimetype: str,
        suggested_name: str | None = None,
    ) -> MediaHandle:
        """Decode *payload* into a fresh file and return a handle to it.

        Raises :class:`PayloadDecodeError` before anything touches disk if the
        payload is not valid base64.  Prefer :meth:`staged`, which releases
        the file automatically.
        """
        path = self._reserve(suggested_name)
        size = await run_sync(self._write, path, payload)
        logger.debug("[staging] wrote %s (%d bytes, %s)", path.name, size, mimetype)
        return self._handle(path, mimetype, suggested_name)

    def release(self, handle: MediaHandle) -> None:
        """Delete the handle's backing file; repeated calls are no-ops."""
        self._remove(handle.path)

    def _remove(self, path: Path) -> None:
        if path.parent != self._root:
            return
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("[staging] failed to remove %s: %s", path, exc)

    @asynccontextmanager
    async def staged(
        self,
        payload: bytes | str,
        mimetype: str,
        suggested_name: str | None = None,
    ) -> AsyncIterator[MediaHandle]:
        """Stage *payload* for the duration of the ``async with`` body.

        The file is removed on every exit path, including cancellation while
        the write is still running in the executor.
        """
        path = self._reserve(suggested_name)
        write = asyncio.ensure_future(run_sync(self._write, path, payload))
        try:
            size = await asyncio.shield(write)
            logger.debug("[staging] wrote %s (%d bytes, %s)", path.name, size, mimetype)
            yield self._handle(path, mimetype, suggested_name)
        finally:
            if not write.done():
                await asyncio.wait([write])
            self._remove(path)

    def purge(self) -> int:
        """Remove every file in the staging directory and return the count."""
        if not self._root.is_dir():
            return 0
        removed = 0
        for entry in self._root.iterdir():
            if not entry.is_file():
                continue
            try:
                entry.unlink()
                removed += 1
            except OSError as exc:
                logger.warning("[staging] failed to purge %s: %s", entry, exc)
        if removed:
            logger.info("[staging] purged %d stale file(s) from %s", removed, self._root)
        return removed
