"""Send-request model and JSON body parsing."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import RequestValidationError

SUPPORTED_TYPES_HINT = "text, image, audio, video"

_MEDIA_NOUN = {"image": "images", "audio": "audio", "video": "video"}


class MessageKind(enum.Enum):
    text = "text"
    image = "image"
    audio = "audio"
    video = "video"

    @classmethod
    def parse(cls, raw: str) -> MessageKind | None:
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None

    @property
    def is_media(self) -> bool:
        return self is not MessageKind.text


@dataclass(frozen=True)
class InlineMedia:
    """Base64 string (or raw bytes) supplied in the request body."""

    data: bytes | str
    mimetype: str
    filename: str | None = None


@dataclass(frozen=True)
class LocalMedia:
    """A file already on this host; sent in place, never staged or deleted."""

    path: Path
    mimetype: str


Payload = str | InlineMedia | LocalMedia | None


@dataclass(frozen=True)
class SendRequest:
    destination_name: str
    kind: MessageKind | None
    payload: Payload
    caption: str = ""
    as_voice_note: bool = True
    kind_label: str = ""

    @property
    def label(self) -> str:
        """Message type as the caller spelled it, for confirmations."""
        if self.kind_label:
            return self.kind_label
        return self.kind.value if self.kind else ""

    def validate(self) -> SendRequest:
        if not isinstance(self.destination_name, str) or not self.destination_name.strip():
            raise RequestValidationError("channelName is required")
        if self.kind is None:
            if self.kind_label:
                raise RequestValidationError(
                    f"Unsupported message type: {self.kind_label}. "
                    f"Supported types: {SUPPORTED_TYPES_HINT}"
                )
            raise RequestValidationError(f"messageType is required ({SUPPORTED_TYPES_HINT})")

        if self.kind is MessageKind.text:
            if not isinstance(self.payload, str) or not self.payload:
                raise RequestValidationError("messageData.text is required for text messages")
            return self

        noun = _MEDIA_NOUN[self.kind.value]
        payload = self.payload
        if isinstance(payload, InlineMedia) and payload.data and payload.mimetype:
            return self
        if isinstance(payload, LocalMedia) and payload.mimetype:
            if not payload.path.is_file():
                raise RequestValidationError(f"File '{payload.path}' not found")
            return self
        raise RequestValidationError(
            f"messageData must contain data (base64) and mimetype for {noun}"
        )

    @classmethod
    def from_json(cls, body: Any) -> SendRequest:
        """Build and validate a request from a ``/send-message`` JSON body."""
        if not isinstance(body, dict):
            raise RequestValidationError("Request body must be a JSON object")

        channel_name = body.get("channelName")
        message_type = body.get("messageType")
        if not isinstance(channel_name, str):
            channel_name = ""
        if not isinstance(message_type, str):
            message_type = ""

        kind = MessageKind.parse(message_type) if message_type else None
        data = body.get("messageData")
        if not isinstance(data, dict):
            data = {}

        payload: Payload = None
        if kind is MessageKind.text:
            payload = data.get("text")
        elif kind is not None:
            raw = data.get("data")
            mimetype = data.get("mimetype")
            filename = data.get("filename")
            if isinstance(raw, str) and isinstance(mimetype, str):
                payload = InlineMedia(
                    data=raw,
                    mimetype=mimetype,
                    filename=filename if isinstance(filename, str) and filename else None,
                )

        caption = data.get("caption")
        return cls(
            destination_name=channel_name,
            kind=kind,
            payload=payload,
            caption=caption if isinstance(caption, str) else "",
            as_voice_note=data.get("asVoiceNote") is not False,
            kind_label=message_type,
        ).validate()
