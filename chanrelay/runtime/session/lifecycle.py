"""Wire session lifecycle events to the state tracker."""

from __future__ import annotations

import importlib
import logging
from typing import Any

from rich.console import Console
from rich.panel import Panel

from .protocol import (
    EVENT_AUTH_FAILURE,
    EVENT_DISCONNECTED,
    EVENT_QR,
    EVENT_READY,
    ChannelSession,
    SessionFactory,
)
from .state import SessionState, SessionStateTracker

logger = logging.getLogger(__name__)


class SessionFactoryError(RuntimeError):
    """Raised when ``SESSION_FACTORY`` cannot be resolved."""


def bind_lifecycle(
    session: ChannelSession,
    tracker: SessionStateTracker,
    console: Console | None = None,
) -> None:
    """Register exactly one listener per lifecycle event on *session*."""
    out = console or Console(stderr=True)

    def on_qr(challenge: Any = "") -> None:
        tracker.transition(SessionState.awaiting_auth, "login challenge issued")
        out.print(Panel(
            str(challenge),
            title="Login required",
            subtitle="Scan or enter this challenge with the messaging app",
        ))

    def on_ready(*_args: Any) -> None:
        tracker.transition(SessionState.ready, "authenticated")

    def on_auth_failure(message: Any = "") -> None:
        logger.error("[session] authentication failure: %s", message)
        tracker.transition(SessionState.auth_failed, str(message))

    def on_disconnected(reason: Any = "") -> None:
        logger.warning("[session] disconnected: %s", reason)
        tracker.transition(SessionState.disconnected, str(reason))

    session.on(EVENT_QR, on_qr)
    session.on(EVENT_READY, on_ready)
    session.on(EVENT_AUTH_FAILURE, on_auth_failure)
    session.on(EVENT_DISCONNECTED, on_disconnected)


def load_session_factory(target: str) -> SessionFactory:
    """Resolve ``"package.module:callable"`` to a session factory."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise SessionFactoryError(
            f"SESSION_FACTORY must look like 'package.module:callable', got {target!r}"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise SessionFactoryError(f"Cannot import {module_name!r}: {exc}") from exc
    factory = module
    for part in attr.split("."):
        factory = getattr(factory, part, None)
        if factory is None:
            raise SessionFactoryError(f"{module_name!r} has no attribute {attr!r}")
    if not callable(factory):
        raise SessionFactoryError(f"{target!r} is not callable")
    return factory  # type: ignore[return-value]
