"""Application lifecycle -- startup and cleanup hooks."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from aiohttp import web

from ..config.settings import Settings
from ..media.staging import StagingStore
from ..session.protocol import ChannelSession
from ..session.state import SessionState, SessionStateTracker

logger = logging.getLogger(__name__)

SESSION_TASK_KEY = "session_task"


async def start_session(session: ChannelSession, tracker: SessionStateTracker) -> None:
    """Run ``session.start()``; a failure closes the gate instead of crashing."""
    try:
        await session.start()
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.error("[startup] session failed to start: %s", exc, exc_info=True)
        tracker.transition(SessionState.disconnected, f"start failed: {exc}")


async def on_startup(
    app: web.Application,
    *,
    settings: Settings,
    staging: StagingStore,
    session: ChannelSession | None,
    tracker: SessionStateTracker,
) -> None:
    settings.ensure_dirs()
    staging.purge()

    if session is None:
        logger.warning(
            "[startup] no SESSION_FACTORY configured -- relay will report not-ready "
            "and reject every send",
        )
        return

    app[SESSION_TASK_KEY] = asyncio.create_task(start_session(session, tracker))
    logger.info("[startup] session starting (%s)", type(session).__name__)


async def on_cleanup(
    app: web.Application,
    *,
    staging: StagingStore,
    session: ChannelSession | None,
) -> None:
    task = app.get(SESSION_TASK_KEY)
    if task and not task.done():
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    if session is not None:
        try:
            await session.stop()
        except Exception as exc:
            logger.warning("[cleanup] session stop failed: %s", exc, exc_info=True)

    staging.purge()
