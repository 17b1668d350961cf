"""Steam community app search."""

import logging
from urllib.parse import quote_plus

import httpx

from zeedzad.constants import STEAM_SEARCH_URL
from zeedzad.models.schemas import SteamAppSearchResult
from zeedzad.utils.http_client import get_http_client

logger = logging.getLogger(__name__)


class SteamError(Exception):
    """Steam search failed."""

    pass


class SteamClient:
    """Thin client for ``steamcommunity.com/actions/SearchApps``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        search_url: str = STEAM_SEARCH_URL,
    ) -> None:
        self._http_client = http_client
        self.search_url = search_url.rstrip("/")

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._http_client or get_http_client("steam")

    async def search_apps(self, query: str) -> list[SteamAppSearchResult]:
        url = f"{self.search_url}/{quote_plus(query)}"
        try:
            response = await self.http_client.get(url)
        except httpx.HTTPError as e:
            raise SteamError(f"failed to search steam: {e}") from e

        if response.status_code != 200:
            logger.error(f"Steam search error: {response.status_code} - {response.text[:200]}")
            raise SteamError(f"steam search failed with status {response.status_code}")

        try:
            return [SteamAppSearchResult.model_validate(item) for item in response.json()]
        except (ValueError, TypeError) as e:
            raise SteamError(f"failed to parse steam response: {e}") from e
