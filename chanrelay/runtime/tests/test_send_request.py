"""Tests for /send-message body parsing and validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from chanrelay.runtime.messaging import (
    InlineMedia,
    LocalMedia,
    MessageKind,
    RequestValidationError,
    SendRequest,
)


def _body(**overrides) -> dict:
    body = {
        "channelName": "Test Channel",
        "messageType": "text",
        "messageData": {"text": "Hello"},
    }
    body.update(overrides)
    return body


class TestFromJson:
    def test_text(self) -> None:
        req = SendRequest.from_json(_body())
        assert req.kind is MessageKind.text
        assert req.payload == "Hello"
        assert req.label == "text"

    def test_type_is_case_insensitive_but_label_is_kept(self) -> None:
        req = SendRequest.from_json(_body(messageType="TEXT"))
        assert req.kind is MessageKind.text
        assert req.label == "TEXT"

    def test_image_with_caption(self) -> None:
        req = SendRequest.from_json(_body(
            messageType="image",
            messageData={"data": "aGVsbG8=", "mimetype": "image/png", "filename": "a.png", "caption": "hi"},
        ))
        assert req.payload == InlineMedia(data="aGVsbG8=", mimetype="image/png", filename="a.png")
        assert req.caption == "hi"

    def test_audio_voice_note_defaults_true(self) -> None:
        data = {"data": "aGVsbG8=", "mimetype": "audio/ogg"}
        assert SendRequest.from_json(_body(messageType="audio", messageData=data)).as_voice_note is True
        data["asVoiceNote"] = False
        assert SendRequest.from_json(_body(messageType="audio", messageData=data)).as_voice_note is False

    def test_non_object_body(self) -> None:
        with pytest.raises(RequestValidationError, match="must be a JSON object"):
            SendRequest.from_json(["not", "an", "object"])


class TestValidation:
    @pytest.mark.parametrize("name", [None, "", "   ", 42])
    def test_channel_required(self, name) -> None:
        with pytest.raises(RequestValidationError, match="channelName is required"):
            SendRequest.from_json(_body(channelName=name))

    def test_channel_checked_before_type(self) -> None:
        with pytest.raises(RequestValidationError, match="channelName is required"):
            SendRequest.from_json(_body(channelName="", messageType="sticker"))

    def test_type_required(self) -> None:
        with pytest.raises(RequestValidationError) as exc_info:
            SendRequest.from_json(_body(messageType=None))
        assert exc_info.value.message == "messageType is required (text, image, audio, video)"
        assert exc_info.value.status == 400

    def test_unsupported_type(self) -> None:
        with pytest.raises(RequestValidationError) as exc_info:
            SendRequest.from_json(_body(messageType="sticker"))
        assert exc_info.value.message == (
            "Unsupported message type: sticker. Supported types: text, image, audio, video"
        )

    @pytest.mark.parametrize("data", [{}, {"text": ""}, {"text": 5}, None])
    def test_text_required(self, data) -> None:
        with pytest.raises(RequestValidationError, match="messageData.text is required"):
            SendRequest.from_json(_body(messageData=data))

    @pytest.mark.parametrize(
        ("kind", "noun"),
        [("image", "images"), ("audio", "audio"), ("video", "video")],
    )
    def test_media_requires_data_and_mimetype(self, kind: str, noun: str) -> None:
        with pytest.raises(RequestValidationError) as exc_info:
            SendRequest.from_json(_body(messageType=kind, messageData={"data": "aGVsbG8="}))
        assert exc_info.value.message == (
            f"messageData must contain data (base64) and mimetype for {noun}"
        )

    def test_local_media_must_exist(self, tmp_path: Path) -> None:
        req = SendRequest("Test Channel", MessageKind.video, LocalMedia(tmp_path / "gone.mp4", "video/mp4"))
        with pytest.raises(RequestValidationError, match="not found"):
            req.validate()

    def test_local_media_ok(self, tmp_path: Path) -> None:
        clip = tmp_path / "clip.mp4"
        clip.write_bytes(b"mp4")
        req = SendRequest("Test Channel", MessageKind.video, LocalMedia(clip, "video/mp4"))
        assert req.validate() is req
