"""IGDB game search."""

from zeedzad.services.igdb.client import IGDBAuthError, IGDBClient, IGDBError

__all__ = [
    "IGDBAuthError",
    "IGDBClient",
    "IGDBError",
]
