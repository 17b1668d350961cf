"""Database module."""

from zeedzad.db.database import create_storage, get_repository, get_storage, init_db
from zeedzad.db.repository import NotFoundError, Repository, RepositoryError
from zeedzad.db.storage import (
    BackendUnavailable,
    ExecResult,
    QueryFailed,
    Storage,
    StorageError,
    TransactionsUnsupported,
)

__all__ = [
    "BackendUnavailable",
    "ExecResult",
    "NotFoundError",
    "QueryFailed",
    "Repository",
    "RepositoryError",
    "Storage",
    "StorageError",
    "TransactionsUnsupported",
    "create_storage",
    "get_repository",
    "get_storage",
    "init_db",
]
