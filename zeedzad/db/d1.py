"""Remote storage backend: Cloudflare D1 over its REST query endpoint.

Each call POSTs exactly one statement. Documentation:
https://developers.cloudflare.com/api/resources/d1/subresources/database/methods/query/
"""

import logging
from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from typing import Any

import httpx

from zeedzad.constants import D1_API_BASE_URL, D1_TIMEOUT
from zeedzad.db.sql import normalize_row, prepare_statement
from zeedzad.db.storage import (
    BackendUnavailable,
    ExecResult,
    Executor,
    QueryFailed,
    Row,
    Storage,
    TransactionsUnsupported,
)

logger = logging.getLogger(__name__)


class D1Storage(Storage):
    """Client for a D1 database.

    Writes (INSERT/UPDATE/DELETE) are sent with foreign-key deferral and
    inlined arguments; reads send the arguments as a separate string array.
    String values that look like timestamps are normalized on read.
    """

    backend = "d1"

    def __init__(
        self,
        account_id: str,
        database_id: str,
        api_token: str,
        client: httpx.AsyncClient | None = None,
        base_url: str = D1_API_BASE_URL,
    ) -> None:
        """Initialize the D1 client.

        Args:
            account_id: Cloudflare account identifier
            database_id: D1 database identifier
            api_token: Cloudflare API token with D1 edit permission
            client: Optional httpx client (tests inject a mock transport)
            base_url: Cloudflare API base URL
        """
        if not (account_id and database_id and api_token):
            raise ValueError("account_id, database_id and api_token are required")

        self.account_id = account_id
        self.database_id = database_id
        self.url = f"{base_url.rstrip('/')}/accounts/{account_id}/d1/database/{database_id}/query"
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=D1_TIMEOUT)

    async def _send(self, sql: str, args: Sequence[Any]) -> dict[str, Any]:
        """Send one statement and return the last per-statement result object."""
        statement, params = prepare_statement(sql, args)
        payload: dict[str, Any] = {"sql": statement}
        if params is not None:
            payload["params"] = params

        try:
            response = await self._client.post(self.url, json=payload, headers=self._headers)
        except httpx.TransportError as e:
            logger.warning(f"D1 request failed: {e!r}")
            raise BackendUnavailable(f"d1 request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise QueryFailed(
                f"d1 returned status {response.status_code}: {response.text[:200]}"
            ) from e

        if not isinstance(body, dict):
            raise QueryFailed(f"unexpected d1 response: {str(body)[:200]}")

        if not body.get("success", response.is_success):
            raise QueryFailed(_error_message(body) or f"d1 returned status {response.status_code}")

        results = body.get("result") or []
        if not results:
            raise QueryFailed("no results returned")

        last = results[-1]
        if not last.get("success", False):
            raise QueryFailed(last.get("error") or _error_message(body) or "d1 query failed")
        return last

    async def ping(self) -> None:
        try:
            await self._send("SELECT 1", ())
        except QueryFailed as e:
            raise BackendUnavailable(str(e)) from e

    async def query(self, sql: str, args: Sequence[Any] = ()) -> list[Row]:
        result = await self._send(sql, args)
        return [normalize_row(row) for row in result.get("results") or [] if isinstance(row, dict)]

    async def execute(self, sql: str, args: Sequence[Any] = ()) -> ExecResult:
        result = await self._send(sql, args)
        meta = result.get("meta") or {}
        return ExecResult(
            last_insert_id=int(meta.get("last_row_id") or 0),
            rows_affected=int(meta.get("changes") or 0),
        )

    def begin(self) -> AbstractAsyncContextManager[Executor]:
        raise TransactionsUnsupported("transactions not supported with D1 REST API")

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _error_message(body: dict[str, Any]) -> str:
    errors = body.get("errors") or []
    messages = [
        str(error.get("message", error)) if isinstance(error, dict) else str(error)
        for error in errors
        if error
    ]
    return "; ".join(messages)
