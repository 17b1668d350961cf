"""Ingestion of a channel's uploads into the video catalogue."""

import logging
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

from zeedzad.constants import SYNC_DEFAULT_MAX_RESULTS, YOUTUBE_CHANNEL_ID
from zeedzad.db.repository import Repository, RepositoryError
from zeedzad.models.schemas import VideoCreate
from zeedzad.services.youtube.client import YouTubeClient, get_best_thumbnail
from zeedzad.utils.logging import LogContext

logger = logging.getLogger(__name__)


@dataclass
class YouTubeSyncResult:
    """Result of one channel sync."""

    added: int = 0
    skipped: int = 0
    errors: int = 0
    total: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def parse_published_at(value: str | None, log: LogContext | None = None) -> datetime:
    """Parse an RFC 3339 publish date to UTC, falling back to now."""
    try:
        parsed = datetime.fromisoformat(value or "")
    except ValueError:
        if log is not None:
            log.warning(f"Unparsable publish date {value!r}, using current time")
        return datetime.now(UTC)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def build_video(item: dict[str, Any], video_id: str, log: LogContext | None = None) -> VideoCreate:
    snippet = item.get("snippet") or {}
    return VideoCreate(
        id=video_id,
        title=snippet.get("title") or "",
        thumbnail=get_best_thumbnail(snippet.get("thumbnails")),
        published_at=parse_published_at(snippet.get("publishedAt"), log),
    )


async def _process_item(
    repository: Repository,
    item: dict[str, Any],
    result: YouTubeSyncResult,
    log: LogContext,
) -> None:
    video_id = ((item.get("snippet") or {}).get("resourceId") or {}).get("videoId")
    if not video_id:
        log.warning(f"Playlist item {item.get('id')} has no video id")
        result.errors += 1
        return

    try:
        if await repository.get_video_by_external_id(video_id) is not None:
            result.skipped += 1
            return
    except RepositoryError as e:
        log.error(f"Failed to look up video {video_id}: {e}")
        result.errors += 1
        return

    try:
        await repository.create_video(build_video(item, video_id, log))
    except RepositoryError as e:
        log.error(f"Failed to insert video {video_id}: {e}")
        result.errors += 1
        return

    result.added += 1


async def sync_channel_videos(
    repository: Repository,
    youtube: YouTubeClient,
    max_results: int = SYNC_DEFAULT_MAX_RESULTS,
    channel_id: str = YOUTUBE_CHANNEL_ID,
) -> YouTubeSyncResult:
    """Insert the channel's most recent uploads that are not stored yet.

    Existing videos are skipped, so repeated runs converge on the same
    catalogue. Per-video failures are counted in ``errors`` and never abort the
    run; failing to resolve the channel or fetch a page does.

    Args:
        repository: Catalogue repository
        youtube: YouTube API client
        max_results: Maximum number of playlist items to examine
        channel_id: Channel whose uploads are ingested

    Returns:
        YouTubeSyncResult with sync statistics

    Raises:
        ChannelNotFoundError: If the channel does not exist
        YouTubeError: If a YouTube request fails
    """
    log = LogContext(logger, channel=channel_id)
    result = YouTubeSyncResult()

    playlist_id = await youtube.get_uploads_playlist_id(channel_id)
    log.debug(f"Uploads playlist: {playlist_id}")

    page_token = None
    while result.total < max_results:
        items, page_token = await youtube.list_playlist_items(playlist_id, page_token)
        if not items:
            break

        for item in items:
            if result.total >= max_results:
                break
            result.total += 1
            await _process_item(repository, item, result, log)

        if not page_token:
            break

    log.info(
        f"Sync finished - Added: {result.added}, Skipped: {result.skipped}, "
        f"Errors: {result.errors}, Total: {result.total}"
    )
    return result
