"""Tests for MIME resolution."""

from __future__ import annotations

from chanrelay.runtime.media.classify import EXTENSION_TO_MIME, MEDIA_KINDS, resolve_mime


class TestResolveMime:
    def test_known_extensions(self) -> None:
        assert resolve_mime("photo.JPG", "image") == "image/jpeg"
        assert resolve_mime("/tmp/clip.mov", "video") == "video/quicktime"
        assert resolve_mime("memo.m4a", "audio") == "audio/mp4"

    def test_ogg_and_opus_are_voice_notes(self) -> None:
        assert resolve_mime("a.ogg", "audio") == "audio/ogg; codecs=opus"
        assert resolve_mime("a.opus", "audio") == "audio/ogg; codecs=opus"

    def test_bare_extension(self) -> None:
        assert resolve_mime("png", "image") == "image/png"
        assert resolve_mime(".webm", "video") == "video/webm"

    def test_unknown_extension_uses_fallback_kind(self) -> None:
        assert resolve_mime("scan.tiff", "image") == "image/tiff"
        assert resolve_mime("song.flac", "audio") == "audio/flac"

    def test_every_mapping_is_a_media_type(self) -> None:
        for ext, mime in EXTENSION_TO_MIME.items():
            assert mime.partition("/")[0] in MEDIA_KINDS, ext
