"""Main API router."""

from fastapi import APIRouter

from zeedzad.api.games import router as games_router
from zeedzad.api.videos import router as videos_router

api_router = APIRouter(prefix="/api")

api_router.include_router(games_router, prefix="/games", tags=["games"])
api_router.include_router(videos_router, prefix="/videos", tags=["videos"])
