"""HTTP helpers used to retrieve remote subtitle sources."""

from playdeck.backend.network_handlers.session import HttpSession, NetError, NotFound

__all__ = ["HttpSession", "NetError", "NotFound"]
