"""External messaging session -- interface, lifecycle binding, and state."""

from .lifecycle import SessionFactoryError, bind_lifecycle, load_session_factory
from .protocol import (
    LIFECYCLE_EVENTS,
    Channel,
    ChannelSession,
    SendOptions,
    SessionFactory,
)
from .state import SessionState, SessionStateTracker

__all__ = [
    "LIFECYCLE_EVENTS",
    "Channel",
    "ChannelSession",
    "SendOptions",
    "SessionFactory",
    "SessionFactoryError",
    "SessionState",
    "SessionStateTracker",
    "bind_lifecycle",
    "load_session_factory",
]
