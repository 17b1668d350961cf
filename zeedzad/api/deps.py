"""Shared request dependencies for the API routes."""

from typing import Annotated

from fastapi import Depends, HTTPException, Query, Request

from zeedzad.services.igdb import IGDBClient
from zeedzad.services.steam import SteamClient
from zeedzad.services.youtube import YouTubeClient


class Pagination:
    """``limit``/``offset`` query parameters, clamped to be non-negative."""

    def __init__(self, limit: int, offset: int) -> None:
        self.limit = max(limit, 0)
        self.offset = max(offset, 0)


def pagination(default_limit: int):
    """Build a dependency reading ``limit`` and ``offset`` with the given default."""

    def dependency(
        limit: Annotated[int, Query()] = default_limit,
        offset: Annotated[int, Query()] = 0,
    ) -> Pagination:
        return Pagination(limit=limit, offset=offset)

    return dependency


def require_query(q: Annotated[str | None, Query()] = None) -> str:
    if not q:
        raise HTTPException(status_code=400, detail="query parameter 'q' is required")
    return q


def get_igdb_client(request: Request) -> IGDBClient:
    client = getattr(request.app.state, "igdb", None)
    if client is None:
        raise HTTPException(status_code=500, detail="igdb client is not configured")
    return client


def get_youtube_client(request: Request) -> YouTubeClient:
    client = getattr(request.app.state, "youtube", None)
    if client is None:
        raise HTTPException(status_code=500, detail="youtube client is not configured")
    return client


def get_steam_client(request: Request) -> SteamClient:
    client = getattr(request.app.state, "steam", None)
    return client or SteamClient()


IGDBDep = Annotated[IGDBClient, Depends(get_igdb_client)]
YouTubeDep = Annotated[YouTubeClient, Depends(get_youtube_client)]
SteamDep = Annotated[SteamClient, Depends(get_steam_client)]
SearchQuery = Annotated[str, Depends(require_query)]
