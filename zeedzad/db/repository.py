"""Entity-level data access for videos and games.

Statements are built with SQLAlchemy Core from the schema in
``zeedzad.models.tables``, compiled for SQLite with positional ``?``
placeholders, and handed to the configured ``Storage`` backend. Rows come back
as plain mappings and are scanned into the pydantic records the API returns.
"""

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.dialects import sqlite
from sqlalchemy.sql import Executable

from zeedzad.constants import DEFAULT_PAGE_SIZE
from zeedzad.db.storage import ExecResult, Row, Storage, StorageError
from zeedzad.models.schemas import GameCreate, GameInfo, GameRead, VideoCreate, VideoRead
from zeedzad.models.tables import games, videos

logger = logging.getLogger(__name__)

_DIALECT = sqlite.dialect()

GAME_INFO_COLUMNS = ("id", "name", "app_id", "url", "icon", "logo")


class RepositoryError(Exception):
    """A repository operation failed; the message starts with the operation name."""

    pass


class NotFoundError(RepositoryError):
    """The requested row does not exist."""

    pass


def compile_statement(stmt: Executable) -> tuple[str, list[Any]]:
    """Compile a Core statement to SQLite text plus positional arguments."""
    compiled = stmt.compile(dialect=_DIALECT)
    params = compiled.params
    return str(compiled), [params[name] for name in compiled.positiontup or ()]


def _now() -> datetime:
    return datetime.now(UTC).replace(microsecond=0)


def _search_pattern(search: str) -> str:
    return f"%{search}%"


def _select_videos():
    game_columns = [games.c[name].label(f"game__{name}") for name in GAME_INFO_COLUMNS]
    return select(videos, *game_columns).select_from(
        videos.outerjoin(games, games.c.id == videos.c.game_id)
    )


def _video_filter(search: str):
    pattern = _search_pattern(search)
    return or_(videos.c.title.ilike(pattern), games.c.name.ilike(pattern))


def _scan_video(row: Row) -> VideoRead:
    game = None
    if row.get("game__id") is not None:
        game = GameInfo(**{name: row.get(f"game__{name}") for name in GAME_INFO_COLUMNS})

    return VideoRead(
        id=row["id"],
        title=row["title"],
        thumbnail=row.get("thumbnail"),
        published_at=str(row["published_at"]),
        game=game,
        created_at=str(row["created_at"]),
        updated_at=str(row["updated_at"]),
    )


def _scan_game(row: Row) -> GameRead:
    return GameRead(
        id=str(row["id"]),
        app_id=row.get("app_id"),
        url=row.get("url"),
        name=row["name"],
        icon=row.get("icon"),
        logo=row.get("logo"),
        created_at=str(row["created_at"]),
        updated_at=str(row["updated_at"]),
    )


class Repository:
    """Typed access to the ``videos`` and ``games`` tables."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage

    async def _query(self, operation: str, stmt: Executable) -> list[Row]:
        sql, args = compile_statement(stmt)
        try:
            return await self.storage.query(sql, args)
        except StorageError as e:
            raise RepositoryError(f"{operation}: {e}") from e

    async def _execute(self, operation: str, stmt: Executable) -> ExecResult:
        sql, args = compile_statement(stmt)
        try:
            return await self.storage.execute(sql, args)
        except StorageError as e:
            raise RepositoryError(f"{operation}: {e}") from e

    async def _count(self, operation: str, stmt: Executable) -> int:
        rows = await self._query(operation, stmt)
        if not rows:
            return 0
        return int(rows[0]["total"] or 0)

    async def ping(self) -> None:
        await self.storage.ping()

    # ------------------------------------------------------------------
    # Videos
    # ------------------------------------------------------------------

    async def list_videos(
        self,
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
        search: str = "",
    ) -> list[VideoRead]:
        """List videos, newest first, optionally filtered by title or game name."""
        stmt = _select_videos()
        if search:
            stmt = stmt.where(_video_filter(search))
        stmt = (
            stmt.order_by(videos.c.published_at.desc(), videos.c.id)
            .limit(max(limit, 0))
            .offset(max(offset, 0))
        )
        rows = await self._query("get videos", stmt)
        return [_scan_video(row) for row in rows]

    async def count_videos(self, search: str = "") -> int:
        stmt = select(func.count(videos.c.id).label("total")).select_from(
            videos.outerjoin(games, games.c.id == videos.c.game_id)
        )
        if search:
            stmt = stmt.where(_video_filter(search))
        return await self._count("get video total items", stmt)

    async def get_video(self, video_id: str) -> VideoRead:
        """Get a video by id.

        Raises:
            NotFoundError: If no video has this id
        """
        rows = await self._query("get video by id", _select_videos().where(videos.c.id == video_id))
        if not rows:
            raise NotFoundError(f"get video by id: video {video_id} not found")
        return _scan_video(rows[0])

    async def get_video_by_external_id(self, video_id: str) -> VideoRead | None:
        """Probe for a video by its YouTube id; a miss returns None."""
        rows = await self._query(
            "get video by youtube id", _select_videos().where(videos.c.id == video_id)
        )
        return _scan_video(rows[0]) if rows else None

    async def create_video(self, video: VideoCreate) -> None:
        now = _now()
        stmt = videos.insert().values(
            id=video.id,
            title=video.title,
            thumbnail=video.thumbnail,
            published_at=video.published_at,
            game_id=video.game_id,
            created_at=now,
            updated_at=now,
        )
        await self._execute("create video", stmt)

    async def update_video_game(self, video_id: str, game_id: str | None) -> None:
        """Link a video to a game (or unlink it when ``game_id`` is None).

        Raises:
            NotFoundError: If the video or the game does not exist
        """
        if game_id is not None:
            stmt = select(func.count(games.c.id).label("total")).where(games.c.id == game_id)
            if not await self._count("update video game", stmt):
                raise NotFoundError(f"update video game: game {game_id} not found")

        stmt = (
            videos.update()
            .where(videos.c.id == video_id)
            .values(game_id=game_id, updated_at=_now())
        )
        result = await self._execute("update video game", stmt)
        if result.rows_affected == 0:
            raise NotFoundError(f"update video game: video {video_id} not found")

    # ------------------------------------------------------------------
    # Games
    # ------------------------------------------------------------------

    async def list_games(
        self,
        offset: int = 0,
        limit: int = DEFAULT_PAGE_SIZE,
        search: str = "",
    ) -> list[GameRead]:
        stmt = select(games)
        if search:
            stmt = stmt.where(games.c.name.ilike(_search_pattern(search)))
        stmt = stmt.order_by(games.c.name.asc(), games.c.id).limit(max(limit, 0)).offset(max(offset, 0))
        rows = await self._query("get games", stmt)
        return [_scan_game(row) for row in rows]

    async def count_games(self, search: str = "") -> int:
        stmt = select(func.count(games.c.id).label("total"))
        if search:
            stmt = stmt.where(games.c.name.ilike(_search_pattern(search)))
        return await self._count("get game total items", stmt)

    async def get_game(self, game_id: str) -> GameRead:
        """Get a game by id.

        Raises:
            NotFoundError: If no game has this id
        """
        rows = await self._query("get game by id", select(games).where(games.c.id == game_id))
        if not rows:
            raise NotFoundError(f"get game by id: game {game_id} not found")
        return _scan_game(rows[0])

    async def create_game(self, data: GameCreate) -> GameRead:
        """Insert a game and return the stored row."""
        game_id = data.id or str(uuid.uuid4())
        now = _now()
        stmt = games.insert().values(
            id=game_id,
            app_id=data.app_id,
            url=data.url,
            name=data.name,
            icon=data.icon,
            logo=data.logo,
            created_at=now,
            updated_at=now,
        )
        await self._execute("create game", stmt)
        logger.info(f"Created game {game_id} ({data.name})")
        return await self.get_game(game_id)
