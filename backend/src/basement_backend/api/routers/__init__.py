"""Route definitions for public HTTP endpoints."""

from basement_backend.api.routers.session import router as session_router

__all__ = ["session_router"]
