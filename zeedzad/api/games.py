"""Game API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from zeedzad.api.deps import IGDBDep, Pagination, SearchQuery, SteamDep, pagination
from zeedzad.constants import DEFAULT_PAGE_SIZE
from zeedzad.db import NotFoundError, Repository, RepositoryError, get_repository
from zeedzad.models.schemas import (
    APIResponse,
    GameCreate,
    GameRead,
    GameSearchResult,
    Meta,
    SteamAppSearchResult,
)
from zeedzad.services.igdb import IGDBError
from zeedzad.services.steam import SteamError

router = APIRouter()
logger = logging.getLogger(__name__)

RepositoryDep = Annotated[Repository, Depends(get_repository)]


@router.get("", response_model=APIResponse[list[GameRead]])
async def list_games(
    repo: RepositoryDep,
    page: Annotated[Pagination, Depends(pagination(DEFAULT_PAGE_SIZE))],
    search: Annotated[str, Query()] = "",
) -> APIResponse[list[GameRead]]:
    """List games by name with optional search."""
    try:
        games = await repo.list_games(offset=page.offset, limit=page.limit, search=search)
        total = await repo.count_games(search=search)
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return APIResponse(
        data=games,
        meta=Meta(total=total, limit=page.limit, offset=page.offset),
    )


@router.post("", response_model=APIResponse[GameRead], status_code=201)
async def create_game(
    data: GameCreate,
    repo: RepositoryDep,
    response: Response,
) -> APIResponse[GameRead]:
    """Create a game.

    When the body carries the id of an existing game, that game is returned
    unchanged with 200.
    """
    try:
        if data.id:
            try:
                existing = await repo.get_game(data.id)
            except NotFoundError:
                pass
            else:
                response.status_code = 200
                return APIResponse(data=existing)

        game = await repo.create_game(data)
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return APIResponse(data=game)


@router.get("/igdb/search", response_model=APIResponse[list[GameSearchResult]])
async def search_igdb(q: SearchQuery, igdb: IGDBDep) -> APIResponse[list[GameSearchResult]]:
    """Search IGDB for main games matching ``q``."""
    try:
        results = await igdb.search_games(q)
    except IGDBError as e:
        logger.error(f"IGDB search failed: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
    return APIResponse(data=results)


@router.get("/steam/search", response_model=APIResponse[list[SteamAppSearchResult]])
async def search_steam(q: SearchQuery, steam: SteamDep) -> APIResponse[list[SteamAppSearchResult]]:
    """Search Steam apps matching ``q``."""
    try:
        results = await steam.search_apps(q)
    except SteamError as e:
        logger.error(f"Steam search failed: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e
    return APIResponse(data=results)


@router.get("/{game_id}", response_model=APIResponse[GameRead])
async def get_game(game_id: str, repo: RepositoryDep) -> APIResponse[GameRead]:
    try:
        game = await repo.get_game(game_id)
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return APIResponse(data=game)
