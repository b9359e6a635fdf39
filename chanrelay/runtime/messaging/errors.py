"""Dispatch error taxonomy; each error knows its HTTP status."""

from __future__ import annotations


class RelayError(Exception):
    status: int = 500

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class NotReadyError(RelayError):
    status = 503

    def __init__(self, message: str = "") -> None:
        super().__init__(
            message or "Messaging session is not ready. Please wait or complete the login challenge."
        )


class RequestValidationError(RelayError):
    status = 400


class ChannelNotFoundError(RelayError):
    status = 404

    def __init__(self, name: str) -> None:
        super().__init__(f'Channel "{name}" not found. Make sure you are subscribed to it.')
        self.name = name


class DispatchFailure(RelayError):
    """The session's send primitive (or another internal step) raised."""

    status = 500
