"""Relay HTTP server -- app factory and entry point."""

from __future__ import annotations

import argparse
import functools
import logging

from aiohttp import web

from .. import __version__
from ..config import settings as settings_module
from ..config.settings import Settings
from ..media.staging import StagingStore
from ..messaging.dispatcher import MessageDispatcher
from ..session.lifecycle import SessionFactoryError, bind_lifecycle, load_session_factory
from ..session.protocol import ChannelSession
from ..session.state import SessionStateTracker
from .lifecycle import on_cleanup, on_startup
from .middleware import SETTINGS_KEY, QuietAccessLogger, auth_middleware
from .routes import RelayRoutes

logger = logging.getLogger(__name__)

_NOISY_LOGGERS = ("asyncio", "aiohttp.client")


class AppFactory:
    """Builds the aiohttp application and owns its collaborators.

    *session* overrides ``SESSION_FACTORY``; tests pass a fake here.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        session: ChannelSession | None = None,
    ) -> None:
        self.settings = settings or settings_module.cfg
        self.tracker = SessionStateTracker()
        self.staging = StagingStore(self.settings.staging_dir)
        self.session = session if session is not None else self._create_session()
        self.dispatcher = MessageDispatcher(self.tracker, self.session, self.staging)
        if self.session is not None:
            bind_lifecycle(self.session, self.tracker)

    def _create_session(self) -> ChannelSession | None:
        target = self.settings.session_factory
        if not target:
            return None
        factory = load_session_factory(target)
        logger.info("[startup] creating session via %s", target)
        return factory(self.settings)

    async def build(self) -> web.Application:
        app = web.Application(
            client_max_size=self.settings.max_request_bytes,
            middlewares=[auth_middleware],
        )
        app[SETTINGS_KEY] = self.settings

        RelayRoutes(self.tracker, self.dispatcher).register(app.router)
        self._register_lifecycle(app)
        return app

    def _register_lifecycle(self, app: web.Application) -> None:
        app.on_startup.append(functools.partial(
            on_startup,
            settings=self.settings,
            staging=self.staging,
            session=self.session,
            tracker=self.tracker,
        ))
        app.on_cleanup.append(functools.partial(
            on_cleanup,
            staging=self.staging,
            session=self.session,
        ))


def _quiet_noisy_loggers() -> None:
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def main() -> None:
    parser = argparse.ArgumentParser(description="chanrelay message relay server")
    parser.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0).")
    parser.add_argument("--port", type=int, default=None, help="Listen port (default: PORT or 3000).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s  %(name)s  %(levelname)s  %(message)s",
    )
    if not args.verbose:
        _quiet_noisy_loggers()

    settings = settings_module.cfg
    host = args.host or settings.host
    port = args.port or settings.port

    try:
        factory = AppFactory(settings)
    except SessionFactoryError as exc:
        raise SystemExit(f"Invalid SESSION_FACTORY: {exc}") from None

    logger.info("Starting chanrelay %s on %s:%d ...", __version__, host, port)
    logger.info("Health check: http://localhost:%d/health", port)
    logger.info("Send message: POST http://localhost:%d/send-message", port)
    logger.info("List channels: GET http://localhost:%d/channels", port)

    web.run_app(factory.build(), host=host, port=port, access_log_class=QuietAccessLogger)


if __name__ == "__main__":
    main()
