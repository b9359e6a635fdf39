"""Route handler classes; each exposes ``register(router)``."""

from .relay_routes import RelayRoutes

__all__ = ["RelayRoutes"]
