"""Embedded storage backend: a local SQLite file driven through SQLAlchemy."""

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from zeedzad.db.sql import to_db_value
from zeedzad.db.storage import (
    BackendUnavailable,
    ExecResult,
    Executor,
    QueryFailed,
    Row,
    Storage,
)

logger = logging.getLogger(__name__)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


async def _run_query(conn: AsyncConnection, sql: str, args: Sequence[Any]) -> list[Row]:
    params = tuple(to_db_value(arg) for arg in args)
    try:
        result = await conn.exec_driver_sql(sql, params) if params else await conn.exec_driver_sql(sql)
        return [dict(row) for row in result.mappings().all()]
    except DBAPIError as e:
        raise QueryFailed(str(e.orig)) from e


async def _run_execute(conn: AsyncConnection, sql: str, args: Sequence[Any]) -> ExecResult:
    params = tuple(to_db_value(arg) for arg in args)
    try:
        result = await conn.exec_driver_sql(sql, params) if params else await conn.exec_driver_sql(sql)
    except DBAPIError as e:
        raise QueryFailed(str(e.orig)) from e
    return ExecResult(
        last_insert_id=result.lastrowid or 0,
        rows_affected=max(result.rowcount, 0),
    )


class SQLiteTransaction(Executor):
    """Executor bound to one open embedded connection."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def query(self, sql: str, args: Sequence[Any] = ()) -> list[Row]:
        return await _run_query(self._conn, sql, args)

    async def execute(self, sql: str, args: Sequence[Any] = ()) -> ExecResult:
        return await _run_execute(self._conn, sql, args)


class SQLiteStorage(Storage):
    """File-backed SQLite storage using an async SQLAlchemy engine (aiosqlite).

    Usage:
        storage = SQLiteStorage("/var/lib/zeedzad/zeedzad.db")
        rows = await storage.query("SELECT id, name FROM games WHERE id = ?", ["g-1"])
        await storage.close()
    """

    backend = "sqlite"

    def __init__(self, path: str, echo: bool = False) -> None:
        self.path = path
        engine_kwargs: dict[str, Any] = {}
        if path == ":memory:":
            # One shared connection, otherwise every checkout sees an empty database.
            engine_kwargs["poolclass"] = StaticPool
            engine_kwargs["connect_args"] = {"check_same_thread": False}

        self.engine: AsyncEngine = create_async_engine(
            f"sqlite+aiosqlite:///{path}",
            echo=echo,
            **engine_kwargs,
        )
        event.listen(self.engine.sync_engine, "connect", _enable_foreign_keys)

    async def ping(self) -> None:
        if self.path != ":memory:" and not Path(self.path).parent.is_dir():
            raise BackendUnavailable(f"sqlite {self.path}: directory does not exist")
        try:
            async with self.engine.connect() as conn:
                await conn.exec_driver_sql("SELECT 1")
        except (SQLAlchemyError, OSError) as e:
            raise BackendUnavailable(f"sqlite {self.path}: {e}") from e

    async def query(self, sql: str, args: Sequence[Any] = ()) -> list[Row]:
        try:
            async with self.engine.connect() as conn:
                return await _run_query(conn, sql, args)
        except QueryFailed:
            raise
        except (SQLAlchemyError, OSError) as e:
            raise BackendUnavailable(str(e)) from e

    async def execute(self, sql: str, args: Sequence[Any] = ()) -> ExecResult:
        try:
            async with self.engine.begin() as conn:
                return await _run_execute(conn, sql, args)
        except QueryFailed:
            raise
        except (SQLAlchemyError, OSError) as e:
            raise BackendUnavailable(str(e)) from e

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[Executor]:
        async with self.engine.begin() as conn:
            yield SQLiteTransaction(conn)

    async def close(self) -> None:
        await self.engine.dispose()
        logger.debug(f"Closed sqlite storage at {self.path}")
