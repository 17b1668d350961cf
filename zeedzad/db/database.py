"""Storage construction, schema bootstrap and request dependencies."""

import logging
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.dialects import sqlite
from sqlalchemy.schema import CreateIndex, CreateTable

from zeedzad.config import Settings
from zeedzad.db.d1 import D1Storage
from zeedzad.db.repository import Repository
from zeedzad.db.sqlite import SQLiteStorage
from zeedzad.db.storage import Storage
from zeedzad.models.tables import metadata

logger = logging.getLogger(__name__)


def create_storage(settings: Settings) -> Storage:
    """Build the backend selected by the configuration (embedded wins)."""
    if settings.storage_backend == "sqlite":
        logger.info(f"Using embedded storage at {settings.sqlite_path}")
        return SQLiteStorage(settings.sqlite_path)

    logger.info(f"Using D1 storage (database {settings.d1_database_id})")
    return D1Storage(
        account_id=settings.d1_account_id,
        database_id=settings.d1_database_id,
        api_token=settings.cloudflare_api_token,
    )


def schema_statements() -> list[str]:
    """CREATE TABLE / CREATE INDEX statements for every table, guarded by IF NOT EXISTS."""
    dialect = sqlite.dialect()
    statements = []
    for table in metadata.sorted_tables:
        statements.append(str(CreateTable(table, if_not_exists=True).compile(dialect=dialect)).strip())
        for index in sorted(table.indexes, key=lambda ix: ix.name):
            statements.append(str(CreateIndex(index, if_not_exists=True).compile(dialect=dialect)).strip())
    return statements


async def init_db(storage: Storage) -> None:
    """Initialize database (create tables if needed)."""
    for statement in schema_statements():
        await storage.execute(statement)
    logger.debug(f"Schema ready on {storage.backend} backend")


def get_storage(request: Request) -> Storage:
    """Dependency for the storage opened during application startup."""
    return request.app.state.storage


def get_repository(storage: Annotated[Storage, Depends(get_storage)]) -> Repository:
    """Dependency for getting a repository over the application storage."""
    return Repository(storage)
