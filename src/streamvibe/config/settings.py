"""Application settings loaded from environment variables and config files."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, PositiveFloat, PositiveInt
from pydantic.networks import PostgresDsn
from pydantic_settings import BaseSettings, SettingsConfigDict

from streamvibe.config import CONFIG_ROOT


class MediaLimit(BaseModel):
    """Size ceiling for a single media class (``video``, ``image``)."""

    max_bytes: Optional[PositiveInt] = None

    model_config = ConfigDict(extra="forbid")


class UploadLimits(BaseModel):
    """Validation limits applied to uploads before any transfer starts."""

    title_max_length: PositiveInt = 100
    description_max_length: PositiveInt = 1000
    media: Dict[str, MediaLimit] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    def max_bytes_for(self, media_class: str) -> Optional[int]:
        limit = self.media.get(media_class)
        return limit.max_bytes if limit else None


def _load_upload_limits(limits_path: Path) -> UploadLimits:
    if not limits_path.exists():
        return UploadLimits()

    raw_data = yaml.safe_load(limits_path.read_text(encoding="utf-8")) or {}

    media: Dict[str, MediaLimit] = {}
    for media_class, config in (raw_data.pop("media", None) or {}).items():
        media[media_class] = MediaLimit(**(config or {}))
    return UploadLimits(media=media, **raw_data)


class Settings(BaseSettings):
    """Primary application settings for StreamVibe."""

    database_url: PostgresDsn = Field(alias="DATABASE_URL")
    db_pool_min_connections: PositiveInt = Field(default=1, alias="DB_POOL_MIN_CONNECTIONS")
    db_pool_max_connections: PositiveInt = Field(default=5, alias="DB_POOL_MAX_CONNECTIONS")
    storage_root: Path = Field(default=Path("storage"), alias="STORAGE_ROOT")
    storage_public_url: HttpUrl = Field(
        default="http://localhost:54321/storage/v1/object/public",
        alias="STORAGE_PUBLIC_URL",
    )
    video_bucket: str = Field(default="videos", alias="VIDEO_BUCKET")
    thumbnail_bucket: str = Field(default="thumbnails", alias="THUMBNAIL_BUCKET")
    object_key_strategy: Literal["unique", "timestamp"] = Field(default="unique", alias="OBJECT_KEY_STRATEGY")
    controls_hide_delay_seconds: PositiveFloat = Field(default=3.0, alias="CONTROLS_HIDE_DELAY_SECONDS")
    user_id: Optional[str] = Field(default=None, alias="STREAMVIBE_USER_ID")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    upload_limits: UploadLimits = Field(
        default_factory=lambda: _load_upload_limits(CONFIG_ROOT / "upload_limits.yaml")
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""

    return Settings()


__all__ = ["MediaLimit", "Settings", "UploadLimits", "get_settings"]
