"""Send pipeline -- request model, error taxonomy, and the dispatcher."""

from .dispatcher import DispatchResult, MessageDispatcher, match_channel
from .errors import (
    ChannelNotFoundError,
    DispatchFailure,
    NotReadyError,
    RelayError,
    RequestValidationError,
)
from .requests import InlineMedia, LocalMedia, MessageKind, SendRequest

__all__ = [
    "ChannelNotFoundError",
    "DispatchFailure",
    "DispatchResult",
    "InlineMedia",
    "LocalMedia",
    "MessageDispatcher",
    "MessageKind",
    "NotReadyError",
    "RelayError",
    "RequestValidationError",
    "SendRequest",
    "match_channel",
]
