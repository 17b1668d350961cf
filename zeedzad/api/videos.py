"""Video API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from zeedzad.api.deps import Pagination, YouTubeDep, pagination
from zeedzad.constants import CATALOGUE_PAGE_SIZE, SYNC_DEFAULT_MAX_RESULTS
from zeedzad.db import Repository, RepositoryError, get_repository
from zeedzad.models.schemas import APIResponse, Meta, SyncResult, VideoGameUpdate, VideoRead
from zeedzad.services.youtube import YouTubeError, sync_channel_videos

router = APIRouter()
logger = logging.getLogger(__name__)

RepositoryDep = Annotated[Repository, Depends(get_repository)]


@router.get("", response_model=APIResponse[list[VideoRead]])
async def list_videos(
    repo: RepositoryDep,
    page: Annotated[Pagination, Depends(pagination(CATALOGUE_PAGE_SIZE))],
    search: Annotated[str, Query()] = "",
) -> APIResponse[list[VideoRead]]:
    """List videos, newest first, searching titles and linked game names."""
    try:
        videos = await repo.list_videos(offset=page.offset, limit=page.limit, search=search)
        total = await repo.count_videos(search=search)
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e

    return APIResponse(
        data=videos,
        meta=Meta(total=total, limit=page.limit, offset=page.offset),
    )


@router.post("/sync", response_model=APIResponse[SyncResult])
async def sync_videos(
    repo: RepositoryDep,
    youtube: YouTubeDep,
    max_results: Annotated[int, Query()] = SYNC_DEFAULT_MAX_RESULTS,
) -> APIResponse[SyncResult]:
    """Fetch the channel's latest uploads and store the new ones."""
    try:
        result = await sync_channel_videos(repo, youtube, max_results=max_results)
    except YouTubeError as e:
        logger.error(f"YouTube sync failed: {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e

    return APIResponse(data=SyncResult(**result.as_dict()))


@router.get("/{video_id}", response_model=APIResponse[VideoRead])
async def get_video(video_id: str, repo: RepositoryDep) -> APIResponse[VideoRead]:
    try:
        video = await repo.get_video(video_id)
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return APIResponse(data=video)


@router.put("/{video_id}/game")
async def update_video_game(
    video_id: str,
    body: VideoGameUpdate,
    repo: RepositoryDep,
) -> Response:
    """Link a game to a video; a null ``game_id`` removes the link."""
    try:
        await repo.update_video_game(video_id, body.game_id)
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    return Response(status_code=200)
