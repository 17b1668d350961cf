"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from zeedzad.constants import SYNC_INTERVAL_YOUTUBE

DEFAULT_STATIC_DIR = str(Path(__file__).parent / "web" / "public")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: Literal["development", "production", "test"] = "development"
    app_name: str = "Zeedzad"
    static_dir: str = DEFAULT_STATIC_DIR
    cors_origins: str = "*"

    # Embedded storage
    sqlite_path: str = ""

    # Remote storage (Cloudflare D1)
    d1_account_id: str = ""
    d1_database_id: str = ""
    cloudflare_api_token: str = ""

    # External APIs
    youtube_api_key: str = ""
    youtube_sync_interval: int = SYNC_INTERVAL_YOUTUBE
    igdb_client_id: str = ""
    igdb_client_secret: str = ""

    @model_validator(mode="after")
    def validate_storage(self) -> "Settings":
        """Require either the embedded or the complete remote storage set."""
        if self.sqlite_path:
            return self

        remote = {
            "D1_ACCOUNT_ID": self.d1_account_id,
            "D1_DATABASE_ID": self.d1_database_id,
            "CLOUDFLARE_API_TOKEN": self.cloudflare_api_token,
        }
        missing = [name for name, value in remote.items() if not value]
        if len(missing) == len(remote):
            raise ValueError(
                "storage is not configured: set SQLITE_PATH or "
                "D1_ACCOUNT_ID, D1_DATABASE_ID and CLOUDFLARE_API_TOKEN"
            )
        if missing:
            raise ValueError(f"incomplete D1 configuration, missing: {', '.join(missing)}")
        return self

    @property
    def storage_backend(self) -> Literal["sqlite", "d1"]:
        """Backend selected by the configuration (embedded wins when both are set)."""
        return "sqlite" if self.sqlite_path else "d1"

    @property
    def has_igdb_credentials(self) -> bool:
        return bool(self.igdb_client_id and self.igdb_client_secret)

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
