"""Registry of reset hooks for module-level singletons (test isolation)."""

from __future__ import annotations

import threading
from collections.abc import Callable

_lock = threading.Lock()
_resetters: list[Callable[[], None]] = []


def register_singleton(reset: Callable[[], None]) -> None:
    """Register *reset* to be called by :func:`reset_all_singletons`."""
    with _lock:
        if reset not in _resetters:
            _resetters.append(reset)


def reset_all_singletons() -> None:
    with _lock:
        hooks = list(_resetters)
    for reset in hooks:
        reset()
