"""Send a text message to a channel through a running relay.

Usage::

    chanrelay-send-text "Test Channel" "Hello world!"
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from rich.console import Console

from chanrelay.runtime.config import settings as settings_module

from .client import RelayClient, RelayClientError, text_payload

console = Console()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chanrelay-send-text",
        description="Send a text message to a messaging channel.",
    )
    parser.add_argument("channel", help="Channel name (case-insensitive).")
    parser.add_argument("text", help="Message text.")
    parser.add_argument("--url", default=None, help="Relay base URL (default: RELAY_URL).")
    return parser


def print_result(ok: bool, body: dict) -> None:
    rendered = json.dumps(body, indent=2, ensure_ascii=False)
    if ok:
        console.print("\n[green]Success![/green]")
        console.print_json(rendered)
    else:
        console.print("\n[red]Error:[/red]")
        console.print_json(rendered)


async def _run(args: argparse.Namespace) -> int:
    cfg = settings_module.cfg
    base_url = args.url or cfg.relay_url
    console.print(f'Sending text to "{args.channel}": "{args.text}"')
    try:
        async with RelayClient(base_url, api_secret=cfg.api_secret) as client:
            status, body = await client.send_message(text_payload(args.channel, args.text))
    except RelayClientError as exc:
        console.print(f"\n[red]Error sending message:[/red] {exc}")
        return 1
    ok = 200 <= status < 300
    print_result(ok, body)
    return 0 if ok else 1


def main() -> None:
    args = _build_parser().parse_args()
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
