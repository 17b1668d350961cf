"""Pydantic schemas for API validation and serialization."""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_serializer

T = TypeVar("T")


# Envelope
class Meta(BaseModel):
    """Pagination metadata."""

    total: int
    limit: int
    offset: int


class APIResponse(BaseModel, Generic[T]):
    """Response envelope; ``meta`` is only emitted for paginated results."""

    # Document the typed fields rather than the serializer's plain dict
    model_config = ConfigDict(json_schema_mode_override="validation")

    data: T
    meta: Meta | None = None

    @model_serializer(mode="wrap")
    def _omit_missing_meta(self, handler) -> dict[str, Any]:
        payload = handler(self)
        if self.meta is None:
            payload.pop("meta", None)
        return payload


# Game schemas
class GameInfo(BaseModel):
    """Game summary embedded in a video."""

    id: str
    name: str
    app_id: str | None = None
    url: str | None = None
    icon: str | None = None
    logo: str | None = None


class GameRead(BaseModel):
    """Game read schema."""

    id: str
    app_id: str | None = None
    url: str | None = None
    name: str
    icon: str | None = None
    logo: str | None = None
    created_at: str
    updated_at: str


class GameCreate(BaseModel):
    """Game creation schema.

    ``id`` is optional; when it matches an existing game that game is returned.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str | None = Field(default=None, min_length=1)
    name: str = Field(min_length=1)
    app_id: str | None = None
    url: str | None = None
    icon: str | None = None
    logo: str | None = None


class GameSearchResult(BaseModel):
    """IGDB search hit."""

    id: int
    name: str
    url: str | None = None


class SteamAppSearchResult(BaseModel):
    """Steam community app search hit."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    appid: str
    name: str
    icon: str | None = None
    logo: str | None = None


# Video schemas
class VideoRead(BaseModel):
    """Video read schema with its linked game, if any."""

    id: str
    title: str
    thumbnail: str | None = None
    published_at: str
    game: GameInfo | None = None
    created_at: str
    updated_at: str


class VideoCreate(BaseModel):
    """Video insert record; ``id`` is the YouTube video id."""

    id: str = Field(min_length=1)
    title: str
    thumbnail: str | None = None
    published_at: datetime
    game_id: str | None = None


class VideoGameUpdate(BaseModel):
    """Body of ``PUT /api/videos/{id}/game``; null unlinks the game."""

    game_id: str | None


# Sync / health
class SyncResult(BaseModel):
    """Outcome of one ingestion run."""

    added: int
    skipped: int
    errors: int
    total: int


class DatabaseHealth(BaseModel):
    """Database health check payload."""

    status: str
    timestamp: datetime
    database: str
    uptime: str
