"""Relay runtime -- HTTP server, media pipeline, session gate, and dispatch."""

from .. import __version__

__all__ = ["__version__"]
