"""MIME-type registry for outbound media."""

from __future__ import annotations

import os

EXTENSION_TO_MIME: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".mp3": "audio/mpeg",
    ".ogg": "audio/ogg; codecs=opus",
    ".opus": "audio/ogg; codecs=opus",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".mp4": "video/mp4",
    ".avi": "video/x-msvideo",
    ".mov": "video/quicktime",
    ".webm": "video/webm",
    ".mkv": "video/x-matroska",
}

MEDIA_KINDS = ("image", "audio", "video")


def _extension(path_or_ext: str) -> str:
    """Return the lowercased extension of *path_or_ext*, dot included."""
    value = path_or_ext.strip().lower()
    ext = os.path.splitext(value)[1]
    if ext:
        return ext
    # A bare extension such as "png" or ".png" has no splitext suffix.
    if value and "/" not in value and os.sep not in value:
        return value if value.startswith(".") else f".{value}"
    return ""


def resolve_mime(path_or_ext: str, fallback_kind: str) -> str:
    """Map a file path or extension to a MIME string.

    Unknown extensions yield ``"<fallback_kind>/<ext>"``.  That guess is
    best-effort only and may not be a registered MIME type; callers must
    tolerate it.
    """
    ext = _extension(path_or_ext)
    known = EXTENSION_TO_MIME.get(ext)
    if known:
        return known
    return f"{fallback_kind}/{ext[1:]}"
