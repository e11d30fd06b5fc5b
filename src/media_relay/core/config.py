"""Application configuration utilities.

This module defines the settings shared by the upstream services. Settings are
loaded from environment variables and passed explicitly to each service.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed application settings loaded from the environment.

    Notes
    -----
    - Environment variables are read with the ``MEDIA_RELAY_`` prefix
      (e.g., ``MEDIA_RELAY_REQUEST_TIMEOUT_SECONDS``).
    - The YouTube API key is also accepted under the bare ``YOUTUBE_API_KEY``
      name. When neither is set the video service runs in degraded mode.
    - ``link_cipher_key`` and ``link_placeholder`` mirror the catalog's
      encryption scheme; change them only if the upstream scheme changes.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEDIA_RELAY_", env_file=".env", extra="ignore", populate_by_name=True
    )

    app_name: str = Field(default="Media Relay", description="Application display name")
    debug: bool = Field(default=False, description="Enable debug mode")

    youtube_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("MEDIA_RELAY_YOUTUBE_API_KEY", "YOUTUBE_API_KEY"),
        description="YouTube Data API v3 key",
    )
    youtube_api_base_url: str = Field(
        default="https://www.googleapis.com/youtube/v3",
        description="Base URL of the YouTube Data API",
    )
    catalog_api_url: str = Field(
        default="https://www.jiosaavn.com/api.php",
        description="Single endpoint of the music catalog API",
    )

    request_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout applied to every upstream request",
    )
    user_agent: str = Field(
        default="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
        description="User-Agent header sent upstream",
    )

    link_cipher_key: str = Field(
        default="38346591",
        pattern=r"^[\x20-\x7e]{8}$",
        description="DES key used by the catalog to encrypt media URLs",
    )
    link_placeholder: str = Field(
        default="_96",
        min_length=1,
        description="Bitrate marker embedded in decrypted media URLs",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache application settings.

    Notes
    -----
    - Cached with ``functools.lru_cache(maxsize=1)`` to provide a single settings instance
      across the process. Call ``get_settings.cache_clear()`` after changing the environment.

    Returns
    -------
    Settings
        The application settings instance.
    """

    settings: Settings = Settings()
    return settings
