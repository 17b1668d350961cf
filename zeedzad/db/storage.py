"""Row-oriented storage contract shared by the embedded and remote backends."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Any

Row = dict[str, Any]


class StorageError(Exception):
    """Base exception for storage errors."""

    pass


class BackendUnavailable(StorageError):
    """The backend could not be reached (I/O or transport failure)."""

    pass


class QueryFailed(StorageError):
    """The backend rejected a statement or returned no usable result."""

    pass


class TransactionsUnsupported(StorageError):
    """The backend cannot run multi-statement transactions."""

    pass


@dataclass(frozen=True)
class ExecResult:
    """Outcome of a write statement."""

    last_insert_id: int = 0
    rows_affected: int = 0


class Executor(ABC):
    """Anything that can run one SQL statement with positional ``?`` arguments."""

    @abstractmethod
    async def query(self, sql: str, args: Sequence[Any] = ()) -> list[Row]:
        """Run a read statement and return its rows in order."""

    @abstractmethod
    async def execute(self, sql: str, args: Sequence[Any] = ()) -> ExecResult:
        """Run a write statement."""


class Storage(Executor):
    """A storage backend selected at startup.

    Failures are surfaced as ``StorageError`` subclasses and never retried.
    """

    backend: str = ""

    @abstractmethod
    async def ping(self) -> None:
        """Raise ``BackendUnavailable`` unless a trivial query succeeds."""

    @abstractmethod
    def begin(self) -> AbstractAsyncContextManager[Executor]:
        """Open a transaction whose executor commits on exit and rolls back on error."""

    @abstractmethod
    async def close(self) -> None:
        """Release connections held by the backend."""
