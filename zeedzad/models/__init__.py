"""Schema tables and API records."""

from zeedzad.models.schemas import (
    APIResponse,
    DatabaseHealth,
    GameCreate,
    GameInfo,
    GameRead,
    GameSearchResult,
    Meta,
    SteamAppSearchResult,
    SyncResult,
    VideoCreate,
    VideoGameUpdate,
    VideoRead,
)
from zeedzad.models.tables import games, metadata, videos

__all__ = [
    "metadata",
    "games",
    "videos",
    "APIResponse",
    "DatabaseHealth",
    "GameCreate",
    "GameInfo",
    "GameRead",
    "GameSearchResult",
    "Meta",
    "SteamAppSearchResult",
    "SyncResult",
    "VideoCreate",
    "VideoGameUpdate",
    "VideoRead",
]
