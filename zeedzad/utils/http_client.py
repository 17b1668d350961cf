"""Persistent httpx clients, one per upstream service.

Clients are created on first use and reused for the life of the process so
outbound calls share pooled keep-alive connections.
"""

from typing import Literal

import httpx

from zeedzad.constants import API_TIMEOUT_EXTERNAL, IGDB_TIMEOUT

Upstream = Literal["igdb", "youtube", "steam"]

_POOL_LIMITS = httpx.Limits(
    max_connections=20,
    max_keepalive_connections=10,
    keepalive_expiry=30,
)

# Twitch OAuth and IGDB share one client; both have a hard per-call timeout
_TIMEOUTS: dict[str, float] = {
    "igdb": IGDB_TIMEOUT,
    "youtube": API_TIMEOUT_EXTERNAL,
    "steam": API_TIMEOUT_EXTERNAL,
}

_clients: dict[str, httpx.AsyncClient] = {}


def get_http_client(upstream: Upstream) -> httpx.AsyncClient:
    """Shared client for ``upstream``, created lazily."""
    client = _clients.get(upstream)
    if client is None or client.is_closed:
        client = httpx.AsyncClient(timeout=_TIMEOUTS[upstream], limits=_POOL_LIMITS)
        _clients[upstream] = client
    return client


async def close_all_clients() -> None:
    """Close every shared client. Called from the application lifespan."""
    while _clients:
        _, client = _clients.popitem()
        await client.aclose()
