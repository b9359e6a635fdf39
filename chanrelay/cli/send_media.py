"""Send an image, audio or video file to a channel through a running relay.

Audio is converted to OGG/Opus and video to H.264/AAC MP4 when ffmpeg is
available; otherwise the original file is sent as-is.

Usage::

    chanrelay-send-media ./photo.jpg "Test Channel" image "Look at this"
    chanrelay-send-media ./memo.m4a "Test Channel" audio
"""

from __future__ import annotations

import argparse
import asyncio
import base64
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console

from chanrelay.runtime.config import settings as settings_module
from chanrelay.runtime.media.classify import MEDIA_KINDS, resolve_mime
from chanrelay.runtime.media.transcode import (
    PassthroughTranscoder,
    TranscodeProvider,
    select_transcoder,
    transcode_for_kind,
)
from chanrelay.runtime.util.async_helpers import run_sync

from .client import RelayClient, RelayClientError
from .send_text import print_result

logger = logging.getLogger(__name__)

console = Console()


def build_media_payload(
    channel_name: str,
    kind: str,
    send_path: Path,
    original_path: Path,
    data: bytes,
    caption: str = "",
) -> dict[str, Any]:
    """Build the ``/send-message`` body for one media file.

    *send_path* decides the MIME type (it may be a converted file);
    *original_path* supplies the filename shown to recipients.
    """
    message_data: dict[str, Any] = {
        "data": base64.b64encode(data).decode("ascii"),
        "mimetype": resolve_mime(send_path.name, kind),
        "filename": original_path.name,
        "filesize": len(data),
    }
    if kind == "audio":
        message_data["asVoiceNote"] = True
    else:
        message_data["caption"] = caption
    return {
        "channelName": channel_name,
        "messageType": kind,
        "messageData": message_data,
    }


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chanrelay-send-media",
        description="Send an image, audio or video file to a messaging channel.",
    )
    parser.add_argument("file", type=Path, help="Path to the media file.")
    parser.add_argument("channel", help="Channel name (case-insensitive).")
    parser.add_argument("kind", choices=MEDIA_KINDS, help="Media type.")
    parser.add_argument("caption", nargs="?", default="", help="Optional caption (image/video).")
    parser.add_argument("--url", default=None, help="Relay base URL (default: RELAY_URL).")
    parser.add_argument(
        "--no-transcode", action="store_true",
        help="Send the file unmodified even if ffmpeg is available.",
    )
    return parser


async def _pick_provider(no_transcode: bool) -> TranscodeProvider:
    if no_transcode:
        return PassthroughTranscoder()
    provider = await select_transcoder(settings_module.cfg)
    if isinstance(provider, PassthroughTranscoder):
        console.print("[yellow]ffmpeg not found -- sending original file without conversion[/yellow]")
    return provider


async def _run(args: argparse.Namespace) -> int:
    cfg = settings_module.cfg
    source: Path = args.file
    if not source.is_file():
        console.print(f"[red]Error:[/red] File not found: {source}")
        return 1

    base_url = args.url or cfg.relay_url
    provider = await _pick_provider(args.no_transcode)
    send_path, owned = await transcode_for_kind(provider, source, args.kind)
    if owned is not None:
        logger.debug("[send-media] sending converted file %s", send_path)
    try:
        data = await run_sync(send_path.read_bytes)
        payload = build_media_payload(
            args.channel, args.kind, send_path, source, data, args.caption,
        )
        console.print(
            f'Sending {args.kind} to "{args.channel}": {source.name} '
            f"({payload['messageData']['mimetype']}, {len(data) / 1024:.1f} KB)"
        )
        async with RelayClient(base_url, api_secret=cfg.api_secret) as client:
            status, body = await client.send_message(payload)
    except (RelayClientError, OSError) as exc:
        console.print(f"\n[red]Error sending {args.kind}:[/red] {exc}")
        return 1
    finally:
        if owned is not None:
            owned.unlink(missing_ok=True)

    ok = 200 <= status < 300
    print_result(ok, body)
    return 0 if ok else 1


def main() -> None:
    args = _build_parser().parse_args()
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
