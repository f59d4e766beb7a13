"""API routers package."""

from .dependencies import router as dependencies_router

__all__ = ["dependencies_router"]
