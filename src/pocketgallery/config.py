"""Configuration for PocketGallery.

Settings are read from ``POCKETGALLERY_*`` environment variables (or a local
``.env`` file) and frozen once loaded. The served root directory is part of
the settings so every request handler sees the same immutable value.

Created: 2026-10-12
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_PORT = 19992


class RootValidationError(Exception):
    """The gallery root is missing or is not a directory."""


def validate_root(path: str | Path) -> Path:
    """Check that *path* exists and is a directory, returning it absolute."""
    root = Path(path).expanduser()
    if not root.exists():
        raise RootValidationError(f'Path "{path}" does not exist')
    if not root.is_dir():
        raise RootValidationError(f'Path "{path}" is not a directory')
    return root.absolute()


class Settings(BaseSettings):
    """Gallery server settings."""

    model_config = SettingsConfigDict(
        env_prefix="POCKETGALLERY_",
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    root_dir: Path = Field(default_factory=Path.cwd, description="Directory served as /")
    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=DEFAULT_PORT, description="TCP port to bind")
    log_level: str = Field(default="INFO", description="Root log level")

    # Thumbnail extraction
    ffmpeg_path: str = Field(default="ffmpeg", description="Frame extraction binary")
    thumbnail_max_concurrency: int = Field(
        default=4, description="Max ffmpeg processes running at once"
    )
    thumbnail_timeout: float = Field(
        default=30.0, description="Seconds before a stalled ffmpeg is killed"
    )
    thumbnail_window_start: float = Field(default=1.0, description="Frame window start (s)")
    thumbnail_window_end: float = Field(default=10.0, description="Frame window end (s)")
    thumbnail_prebuffer_bytes: int = Field(
        default=64 * 1024, description="Bytes held back before the first flush"
    )

    # Listing / streaming
    sniff_bytes: int = Field(default=8192, description="Leading bytes read for sniffing")
    probe_concurrency: int = Field(default=16, description="Parallel stat/sniff per listing")
    stream_chunk_size: int = Field(default=64 * 1024, description="Raw file chunk size")

    @field_validator(
        "port",
        "thumbnail_max_concurrency",
        "thumbnail_prebuffer_bytes",
        "sniff_bytes",
        "probe_concurrency",
        "stream_chunk_size",
    )
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("thumbnail_timeout")
    @classmethod
    def _positive_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def _check_window(self) -> Settings:
        if self.thumbnail_window_start < 0:
            raise ValueError("thumbnail_window_start must not be negative")
        if self.thumbnail_window_end <= self.thumbnail_window_start:
            raise ValueError("thumbnail_window_end must be after thumbnail_window_start")
        return self

    @classmethod
    def load(cls, **overrides) -> Settings:
        """Build settings from the environment, applying explicit overrides."""
        return cls(**{k: v for k, v in overrides.items() if v is not None})


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first call."""
    return Settings.load()
