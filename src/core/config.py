"""Application configuration via Pydantic Settings."""
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass(frozen=True)
class IngestionConfig:
    """Immutable configuration handed to the ingestion pipeline."""

    bucket: str
    staging_dir: Path
    max_upload_bytes: int = 1 << 30
    allowed_media_type: str = "video/mp4"
    ffprobe_bin: str = "ffprobe"
    ffmpeg_bin: str = "ffmpeg"
    tool_timeout_seconds: float = 120.0
    chunk_size: int = 1024 * 1024


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Tubely"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8091
    api_prefix: str = "/api"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # Auth
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/tubely.db"

    # Object storage
    s3_bucket: str = "tubely-videos"
    s3_region: str = "us-east-1"
    s3_endpoint_url: str | None = None
    s3_access_key_id: str | None = None
    s3_secret_access_key: str | None = None
    signed_url_ttl_seconds: int = 15 * 60

    # Local storage
    staging_path: Path = Field(default=Path("./data/staging"))
    assets_path: Path = Field(default=Path("./data/assets"))
    max_video_size_bytes: int = 1 << 30
    max_thumbnail_size_bytes: int = 10 << 20
    allowed_video_type: str = "video/mp4"
    allowed_thumbnail_types: list[str] = Field(
        default_factory=lambda: ["image/jpeg", "image/png"]
    )

    # Media tools
    ffprobe_bin: str = "ffprobe"
    ffmpeg_bin: str = "ffmpeg"
    media_tool_timeout_seconds: float = 120.0

    @field_validator("staging_path", "assets_path", mode="before")
    @classmethod
    def ensure_path(cls, v: str | Path) -> Path:
        """Convert string to Path and ensure it exists."""
        path = Path(v)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == Environment.PRODUCTION

    def ingestion_config(self) -> IngestionConfig:
        """Snapshot the settings the ingestion pipeline needs."""
        return IngestionConfig(
            bucket=self.s3_bucket,
            staging_dir=self.staging_path,
            max_upload_bytes=self.max_video_size_bytes,
            allowed_media_type=self.allowed_video_type,
            ffprobe_bin=self.ffprobe_bin,
            ffmpeg_bin=self.ffmpeg_bin,
            tool_timeout_seconds=self.media_tool_timeout_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
