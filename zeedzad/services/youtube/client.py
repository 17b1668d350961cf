"""YouTube Data API v3 client (API key access to public channel data)."""

import logging
from typing import Any

import httpx

from zeedzad.constants import YOUTUBE_API_BASE_URL, YOUTUBE_MAX_PAGE_SIZE
from zeedzad.utils.http_client import get_http_client

logger = logging.getLogger(__name__)

THUMBNAIL_QUALITIES = ("maxres", "standard", "high", "medium", "default")


class YouTubeError(Exception):
    """Base exception for YouTube API errors."""

    status_code = 500


class ChannelNotFoundError(YouTubeError):
    """The channel id does not resolve to a channel."""

    status_code = 404


def get_best_thumbnail(thumbnails: dict[str, Any] | None) -> str | None:
    """Get the best quality thumbnail URL."""
    for quality in THUMBNAIL_QUALITIES:
        url = ((thumbnails or {}).get(quality) or {}).get("url")
        if url:
            return url
    return None


class YouTubeClient:
    """Reads channel and playlist data with an API key.

    Usage:
        client = YouTubeClient(api_key="...")
        playlist_id = await client.get_uploads_playlist_id("UC...")
        items, next_token = await client.list_playlist_items(playlist_id)
    """

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient | None = None,
        base_url: str = YOUTUBE_API_BASE_URL,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._http_client = http_client

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._http_client or get_http_client("youtube")

    async def _get(self, resource: str, params: dict[str, Any], action: str) -> dict[str, Any]:
        if not self.api_key:
            raise YouTubeError(f"{action}: YOUTUBE_API_KEY is not configured")

        try:
            response = await self.http_client.get(
                f"{self.base_url}/{resource}",
                params={**params, "key": self.api_key},
            )
        except httpx.HTTPError as e:
            raise YouTubeError(f"{action}: {e}") from e

        if response.status_code != 200:
            logger.error(f"YouTube API error: {response.status_code} - {response.text[:200]}")
            raise YouTubeError(f"{action}: status {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise YouTubeError(f"{action}: invalid response body") from e

    async def get_uploads_playlist_id(self, channel_id: str) -> str:
        """Resolve the uploads playlist of a channel.

        Raises:
            ChannelNotFoundError: If the channel does not exist
            YouTubeError: If the request fails
        """
        data = await self._get(
            "channels",
            {"part": "contentDetails", "id": channel_id},
            "failed to fetch channel",
        )
        items = data.get("items") or []
        if not items:
            raise ChannelNotFoundError("channel not found")

        uploads = (
            items[0].get("contentDetails", {}).get("relatedPlaylists", {}).get("uploads")
        )
        if not uploads:
            raise ChannelNotFoundError("channel has no uploads playlist")
        return uploads

    async def list_playlist_items(
        self,
        playlist_id: str,
        page_token: str | None = None,
        page_size: int = YOUTUBE_MAX_PAGE_SIZE,
    ) -> tuple[list[dict[str, Any]], str | None]:
        """Fetch one page of playlist items.

        Returns:
            The page's items and the next page token (None on the last page)
        """
        params: dict[str, Any] = {
            "part": "snippet",
            "playlistId": playlist_id,
            "maxResults": min(page_size, YOUTUBE_MAX_PAGE_SIZE),
        }
        if page_token:
            params["pageToken"] = page_token

        data = await self._get("playlistItems", params, "failed to fetch playlist items")
        return data.get("items") or [], data.get("nextPageToken") or None
