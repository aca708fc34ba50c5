"""Application configuration for playlist_tracker."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


DEFAULT_PLACEHOLDER_THUMBNAIL = "https://i.ytimg.com/vi/{id}/hqdefault.jpg"


class Settings(BaseSettings):
    """Settings loaded from environment variables and optional .env file."""

    model_config = SettingsConfigDict(
        env_prefix="PLAYLIST_TRACKER_",
        env_file=".env",
        extra="ignore",
    )

    ytdlp_path: Optional[Path] = None
    cookies_dir: Path = Field(
        default_factory=lambda: Path.home()
        / ".config"
        / "playlist_tracker"
        / "cookies"
    )

    max_playlist_size: int = Field(default=200, ge=1)
    default_max_items: int = Field(default=200, ge=1)
    chunk_size: int = Field(default=50, ge=1)
    chunk_timeout_seconds: float = Field(default=45.0, gt=0)
    total_timeout_seconds: float = Field(default=120.0, gt=0)
    max_output_bytes: int = Field(default=16 * 1024 * 1024, ge=1024)

    max_thumbnail_width: int = Field(default=1280, ge=1)
    placeholder_thumbnail_template: str = DEFAULT_PLACEHOLDER_THUMBNAIL

    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

