"""Server module -- aiohttp application factory and HTTP handlers."""

from __future__ import annotations

from .app import AppFactory, main

__all__ = ["AppFactory", "main"]
