"""Smoke-test a running relay.

Checks health, status and channel listing, then optionally sends a text,
an image and an audio file to one channel.  Prints a step table and exits
non-zero if any step failed.

Usage::

    chanrelay-probe
    chanrelay-probe --channel "Test Channel" --image ./photo.jpg --audio ./memo.ogg
"""

from __future__ import annotations

import argparse
import asyncio
import base64
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable

from rich.console import Console
from rich.table import Table

from chanrelay.runtime.config import settings as settings_module
from chanrelay.runtime.media.classify import resolve_mime
from chanrelay.runtime.util.async_helpers import run_sync

from .client import RelayClient, RelayClientError, text_payload

console = Console()

PROBE_TEXT = "Hello from the chanrelay API probe!"
PROBE_CAPTION = "Test image from chanrelay-probe"


@dataclass
class StepResult:
    name: str
    status: int | None = None
    ok: bool = False
    skipped: bool = False
    detail: str = ""


async def _media_payload(channel: str, kind: str, path: Path) -> dict[str, Any]:
    data = await run_sync(path.read_bytes)
    message_data: dict[str, Any] = {
        "data": base64.b64encode(data).decode("ascii"),
        "mimetype": resolve_mime(path.name, kind),
        "filename": path.name,
    }
    if kind == "audio":
        message_data["asVoiceNote"] = True
    else:
        message_data["caption"] = PROBE_CAPTION
    return {"channelName": channel, "messageType": kind, "messageData": message_data}


def _summarize(body: dict[str, Any]) -> str:
    if "error" in body:
        return str(body["error"])
    if "message" in body:
        return str(body["message"])
    if "count" in body:
        return f"{body['count']} channel(s)"
    if "ready" in body:
        return f"ready={body['ready']}"
    if "whatsappReady" in body:
        return f"status={body.get('status')} ready={body['whatsappReady']}"
    return ""


async def _step(
    name: str,
    call: Callable[[], Awaitable[tuple[int, dict[str, Any]]]],
) -> tuple[StepResult, dict[str, Any]]:
    try:
        status, body = await call()
    except (RelayClientError, OSError) as exc:
        return StepResult(name=name, detail=str(exc)), {}
    ok = 200 <= status < 300
    return StepResult(name=name, status=status, ok=ok, detail=_summarize(body)), body


class Probe:
    """Runs the probe steps in order against one relay client."""

    def __init__(
        self,
        client: RelayClient,
        *,
        channel: str | None = None,
        image: Path | None = None,
        audio: Path | None = None,
    ) -> None:
        self._client = client
        self._channel = channel
        self._image = image
        self._audio = audio

    async def run(self) -> list[StepResult]:
        results: list[StepResult] = []

        health, _ = await _step("health", self._client.health)
        results.append(health)
        if health.status is None:
            # Relay unreachable; nothing else can succeed.
            return results

        status, _ = await _step("status", self._client.status)
        results.append(status)

        listing, body = await _step("channels", self._client.channels)
        results.append(listing)
        names = [ch.get("name", "") for ch in body.get("channels", [])]

        channel = self._channel or (names[0] if names else None)
        if channel is None:
            for name in ("send text", "send image", "send audio"):
                results.append(StepResult(name=name, skipped=True, detail="no channel available"))
            return results

        text, _ = await _step(
            "send text",
            lambda: self._client.send_message(text_payload(channel, PROBE_TEXT)),
        )
        results.append(text)
        results.append(await self._send_file("send image", channel, "image", self._image))
        results.append(await self._send_file("send audio", channel, "audio", self._audio))
        return results

    async def _send_file(
        self, name: str, channel: str, kind: str, path: Path | None,
    ) -> StepResult:
        if path is None:
            return StepResult(name=name, skipped=True, detail=f"no --{kind} given")
        if not path.is_file():
            return StepResult(name=name, skipped=True, detail=f"file not found: {path}")
        payload = await _media_payload(channel, kind, path)
        result, _ = await _step(name, lambda: self._client.send_message(payload))
        return result


def render(results: list[StepResult]) -> Table:
    table = Table(title="chanrelay API probe")
    table.add_column("Step")
    table.add_column("HTTP", justify="right")
    table.add_column("Result")
    table.add_column("Detail", overflow="fold")
    for r in results:
        if r.skipped:
            outcome = "[dim]skipped[/dim]"
        elif r.ok:
            outcome = "[green]ok[/green]"
        else:
            outcome = "[red]failed[/red]"
        table.add_row(r.name, "" if r.status is None else str(r.status), outcome, r.detail)
    return table


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chanrelay-probe",
        description="Smoke-test a running chanrelay server.",
    )
    parser.add_argument("--channel", default=None, help="Channel for send steps (default: first listed).")
    parser.add_argument("--image", type=Path, default=None, help="Image file for the image send step.")
    parser.add_argument("--audio", type=Path, default=None, help="Audio file for the audio send step.")
    parser.add_argument("--url", default=None, help="Relay base URL (default: RELAY_URL).")
    return parser


async def _run(args: argparse.Namespace) -> int:
    cfg = settings_module.cfg
    base_url = args.url or cfg.relay_url
    console.print(f"Probing relay at {base_url} ...")
    async with RelayClient(base_url, api_secret=cfg.api_secret) as client:
        probe = Probe(client, channel=args.channel, image=args.image, audio=args.audio)
        results = await probe.run()
    console.print(render(results))
    failed = [r for r in results if not r.ok and not r.skipped]
    return 1 if failed else 0


def main() -> None:
    args = _build_parser().parse_args()
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
