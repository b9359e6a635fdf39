"""Session lifecycle state and the dispatch gate derived from it."""

from __future__ import annotations

import enum
import logging
import threading

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    initializing = "initializing"
    awaiting_auth = "awaiting_auth"
    ready = "ready"
    auth_failed = "auth_failed"
    disconnected = "disconnected"


_S = SessionState

# AuthFailed and Disconnected are reachable from anywhere.  Leaving them only
# happens when the session itself emits a new login challenge or "ready".
_ALLOWED: dict[SessionState, frozenset[SessionState]] = {
    _S.initializing: frozenset({_S.awaiting_auth, _S.ready, _S.auth_failed, _S.disconnected}),
    _S.awaiting_auth: frozenset({_S.awaiting_auth, _S.ready, _S.auth_failed, _S.disconnected}),
    _S.ready: frozenset({_S.auth_failed, _S.disconnected}),
    _S.auth_failed: frozenset({_S.awaiting_auth, _S.ready, _S.auth_failed, _S.disconnected}),
    _S.disconnected: frozenset({_S.awaiting_auth, _S.ready, _S.auth_failed, _S.disconnected}),
}


class SessionStateTracker:
    """Single source of truth for session liveness.

    Starts in ``initializing`` (gate closed).  Lifecycle listeners are the
    only writers; request handlers only call :meth:`is_ready`.  There is no
    implicit reset.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state = SessionState.initializing
        self._reason = ""

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def reason(self) -> str:
        with self._lock:
            return self._reason

    def is_ready(self) -> bool:
        with self._lock:
            return self._state is SessionState.ready

    def transition(self, new: SessionState, reason: str = "") -> bool:
        """Move to *new*; returns False (and logs) if the move is not allowed."""
        with self._lock:
            old = self._state
            if new not in _ALLOWED[old]:
                logger.warning(
                    "[session] ignoring transition %s -> %s (%s)",
                    old.value, new.value, reason or "no reason",
                )
                return False
            self._state = new
            self._reason = reason
        if old is not new:
            logger.info("[session] %s -> %s %s", old.value, new.value, reason)
        return True

    def snapshot(self) -> dict[str, object]:
        with self._lock:
            return {
                "state": self._state.value,
                "ready": self._state is SessionState.ready,
                "reason": self._reason,
            }
