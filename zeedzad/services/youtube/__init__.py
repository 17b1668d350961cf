"""YouTube services module."""

from zeedzad.services.youtube.client import (
    ChannelNotFoundError,
    YouTubeClient,
    YouTubeError,
    get_best_thumbnail,
)
from zeedzad.services.youtube.sync import (
    YouTubeSyncResult,
    sync_channel_videos,
)

__all__ = [
    "ChannelNotFoundError",
    "YouTubeClient",
    "YouTubeError",
    "YouTubeSyncResult",
    "get_best_thumbnail",
    "sync_channel_videos",
]
