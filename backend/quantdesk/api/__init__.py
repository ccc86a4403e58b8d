"""API endpoints."""

from quantdesk.api.routes import router

__all__ = [
    "router",
]
