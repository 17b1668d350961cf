"""IGDB API client.

Authenticates with Twitch OAuth2 client credentials and searches the IGDB
games endpoint. Documentation: https://api-docs.igdb.com/
"""

import asyncio
import logging
from datetime import UTC, datetime, timedelta

import httpx

from zeedzad.constants import IGDB_GAMES_URL, TOKEN_EXPIRY_MARGIN_SECONDS, TWITCH_TOKEN_URL
from zeedzad.models.schemas import GameSearchResult
from zeedzad.utils.http_client import get_http_client

logger = logging.getLogger(__name__)


class IGDBError(Exception):
    """Base exception for IGDB errors."""

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class IGDBAuthError(IGDBError):
    """Token request rejected."""

    pass


class IGDBClient:
    """Client for the IGDB v4 API with a cached bearer token.

    Usage:
        client = IGDBClient(client_id="...", client_secret="...")
        results = await client.search_games("celeste")
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        http_client: httpx.AsyncClient | None = None,
        token_url: str = TWITCH_TOKEN_URL,
        games_url: str = IGDB_GAMES_URL,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.games_url = games_url
        self._http_client = http_client
        self._access_token = ""
        self._expires_at = datetime.min.replace(tzinfo=UTC)
        self._refresh_lock = asyncio.Lock()

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._http_client or get_http_client("igdb")

    def _valid_token(self) -> str | None:
        if self._access_token and datetime.now(UTC) < self._expires_at:
            return self._access_token
        return None

    def reset_token(self) -> None:
        self._access_token = ""
        self._expires_at = datetime.min.replace(tzinfo=UTC)

    async def _request_token(self) -> str:
        """Request a new access token from Twitch and store it."""
        try:
            response = await self.http_client.post(
                self.token_url,
                params={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "grant_type": "client_credentials",
                },
            )
        except httpx.HTTPError as e:
            self.reset_token()
            raise IGDBAuthError(f"failed to request token: {e}") from e

        if response.status_code != 200:
            self.reset_token()
            raise IGDBAuthError(
                f"token request failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
            access_token = data["access_token"]
            expires_in = int(data["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            self.reset_token()
            raise IGDBAuthError(f"failed to decode token response: {e}") from e

        self._access_token = access_token
        # Refresh before the token enters its final minutes of validity
        self._expires_at = datetime.now(UTC) + timedelta(
            seconds=expires_in - TOKEN_EXPIRY_MARGIN_SECONDS
        )
        logger.info(f"Obtained IGDB access token (valid until {self._expires_at.isoformat()})")
        return access_token

    async def ensure_valid_token(self) -> str:
        """Return a usable token, refreshing it at most once for concurrent callers."""
        token = self._valid_token()
        if token:
            return token

        async with self._refresh_lock:
            token = self._valid_token()
            if token:
                return token
            return await self._request_token()

    async def search_games(self, query: str) -> list[GameSearchResult]:
        """Search main games by name.

        Args:
            query: Game name, interpolated verbatim into the IGDB query

        Returns:
            Matching games in the order IGDB returns them

        Raises:
            IGDBAuthError: If no token could be obtained
            IGDBError: If the search request fails
        """
        token = await self.ensure_valid_token()
        body = f'search "{query}"; fields name,url; where game_type = 0;'

        try:
            response = await self.http_client.post(
                self.games_url,
                content=body,
                headers={
                    "Client-ID": self.client_id,
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "text/plain",
                },
            )
        except httpx.HTTPError as e:
            raise IGDBError(f"failed to search games: {e}") from e

        if response.status_code == 401:
            self.reset_token()
            raise IGDBAuthError(
                f"search request failed with status 401: {response.text}",
                status_code=401,
                body=response.text,
            )
        if response.status_code != 200:
            raise IGDBError(
                f"search request failed with status {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            return [GameSearchResult.model_validate(item) for item in response.json()]
        except (ValueError, TypeError) as e:
            raise IGDBError(f"failed to decode search response: {e}") from e
