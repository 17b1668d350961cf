"""API routes."""

from zeedzad.api.router import api_router

__all__ = ["api_router"]
