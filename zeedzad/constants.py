"""Application constants - centralized configuration values."""

# =============================================================================
# Pagination
# =============================================================================
DEFAULT_PAGE_SIZE = 20
CATALOGUE_PAGE_SIZE = 24  # Video grid on the front end

# =============================================================================
# Storage
# =============================================================================
CANONICAL_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
D1_API_BASE_URL = "https://api.cloudflare.com/client/v4"
D1_DEFER_FOREIGN_KEYS = "PRAGMA defer_foreign_keys = on; "

# =============================================================================
# API Timeouts (in seconds)
# =============================================================================
API_TIMEOUT_EXTERNAL = 15.0
IGDB_TIMEOUT = 10.0
D1_TIMEOUT = 30.0

# =============================================================================
# IGDB
# =============================================================================
TWITCH_TOKEN_URL = "https://id.twitch.tv/oauth2/token"
IGDB_GAMES_URL = "https://api.igdb.com/v4/games"
TOKEN_EXPIRY_MARGIN_SECONDS = 5 * 60

# =============================================================================
# Steam
# =============================================================================
STEAM_SEARCH_URL = "https://steamcommunity.com/actions/SearchApps"

# =============================================================================
# YouTube
# =============================================================================
YOUTUBE_API_BASE_URL = "https://www.googleapis.com/youtube/v3"
YOUTUBE_CHANNEL_ID = "UCsGx1qSnAS2P1YCJPYnYVUg"  # OPZTV
YOUTUBE_MAX_PAGE_SIZE = 50
SYNC_DEFAULT_MAX_RESULTS = 50

# =============================================================================
# Background Task Intervals (in seconds)
# =============================================================================
SYNC_INTERVAL_YOUTUBE = 6 * 60 * 60  # 6 hours
MAX_CONSECUTIVE_FAILURES = 5  # For background tasks
SHUTDOWN_GRACE_PERIOD = 10.0

# =============================================================================
# Server
# =============================================================================
DEFAULT_LISTEN_ADDRESS = ":8088"
GZIP_MINIMUM_SIZE = 500
