"""Pytest configuration and fixtures."""

import json
import os
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any

# Minimal environment, set before the application module reads its settings
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("SQLITE_PATH", ":memory:")
os.environ.setdefault("YOUTUBE_SYNC_INTERVAL", "0")

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from zeedzad.api.deps import get_igdb_client, get_steam_client, get_youtube_client
from zeedzad.db import Repository, get_storage, init_db
from zeedzad.db.sqlite import SQLiteStorage
from zeedzad.main import app
from zeedzad.services.igdb import IGDBClient
from zeedzad.services.steam import SteamClient
from zeedzad.services.youtube import YouTubeClient

CHANNEL_ID = "UCsGx1qSnAS2P1YCJPYnYVUg"
UPLOADS_PLAYLIST_ID = "UUsGx1qSnAS2P1YCJPYnYVUg"


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    def requests_to(self, path_suffix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path_suffix)]

    def json_bodies(self) -> list[Any]:
        return [json.loads(r.content) for r in self.requests]


def playlist_item(video_id: str, title: str | None = None, published_at: str = "2025-10-22T09:00:27Z") -> dict:
    """A playlistItems resource as returned with ``part=snippet``."""
    return {
        "id": f"item-{video_id}",
        "snippet": {
            "title": title or f"Video {video_id}",
            "publishedAt": published_at,
            "thumbnails": {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                "high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"},
            },
            "resourceId": {"kind": "youtube#video", "videoId": video_id},
        },
    }


def youtube_handler(pages: list[list[dict]], channel_found: bool = True):
    """Serve the channel lookup and the given playlist pages."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/channels"):
            if not channel_found:
                return httpx.Response(200, json={"items": []})
            return httpx.Response(
                200,
                json={"items": [{"contentDetails": {"relatedPlaylists": {"uploads": UPLOADS_PLAYLIST_ID}}}]},
            )

        if request.url.path.endswith("/playlistItems"):
            token = request.url.params.get("pageToken")
            index = int(token.split("-")[1]) if token else 0
            body: dict[str, Any] = {"items": pages[index] if index < len(pages) else []}
            if index + 1 < len(pages):
                body["nextPageToken"] = f"page-{index + 1}"
            return httpx.Response(200, json=body)

        return httpx.Response(404, json={"error": {"message": "unexpected path"}})

    return handler


@pytest_asyncio.fixture
async def storage(tmp_path: Path) -> AsyncGenerator[SQLiteStorage, None]:
    """Fresh embedded database with the schema applied."""
    store = SQLiteStorage(str(tmp_path / "zeedzad-test.db"))
    await init_db(store)
    yield store
    await store.close()


@pytest.fixture
def repository(storage: SQLiteStorage) -> Repository:
    return Repository(storage)


@pytest.fixture
def make_item() -> Callable[..., dict]:
    """Factory for playlist items."""
    return playlist_item


@pytest.fixture
def make_youtube() -> Callable[..., tuple[YouTubeClient, RecordingTransport]]:
    """Factory for a YouTube client backed by canned playlist pages."""

    def factory(pages: list[list[dict]], channel_found: bool = True):
        transport = RecordingTransport(youtube_handler(pages, channel_found))
        client = YouTubeClient(api_key="test-key", http_client=httpx.AsyncClient(transport=transport))
        return client, transport

    return factory


@pytest.fixture
def igdb_transport() -> RecordingTransport:
    """Twitch token endpoint plus IGDB search returning one game."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "id.twitch.tv":
            return httpx.Response(
                200,
                json={"access_token": "token-1", "expires_in": 5_000_000, "token_type": "bearer"},
            )
        return httpx.Response(200, json=[{"id": 1942, "name": "Celeste", "url": "https://www.igdb.com/games/celeste"}])

    return RecordingTransport(handler)


@pytest.fixture
def igdb_client(igdb_transport: RecordingTransport) -> IGDBClient:
    return IGDBClient(
        client_id="client-id",
        client_secret="client-secret",
        http_client=httpx.AsyncClient(transport=igdb_transport),
    )


@pytest.fixture
def steam_client() -> SteamClient:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=[{"appid": 504230, "name": "Celeste", "icon": "https://cdn/icon.jpg", "logo": "https://cdn/logo.jpg"}],
        )

    return SteamClient(http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest_asyncio.fixture
async def client(
    storage: SQLiteStorage,
    igdb_client: IGDBClient,
    steam_client: SteamClient,
    make_youtube,
) -> AsyncGenerator[AsyncClient, None]:
    """Test client wired to the per-test database and fake upstream APIs."""
    youtube, _ = make_youtube([[playlist_item("A"), playlist_item("B"), playlist_item("C")]])

    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_igdb_client] = lambda: igdb_client
    app.dependency_overrides[get_youtube_client] = lambda: youtube
    app.dependency_overrides[get_steam_client] = lambda: steam_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
