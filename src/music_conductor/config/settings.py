"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.constants import SpotifyEndpoints
from ..domain.shared.messages import ErrorMessages


class DatabaseSettings(BaseModel):
    """Credential database configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/credentials.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    enabled: bool = True
    busy_timeout_ms: int = Field(
        default=5000,
        ge=1000,
        le=30000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: int = Field(
        default=10,
        ge=1,
        le=60,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith("sqlite://"):
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class SpotifySettings(BaseModel):
    """Spotify application credentials and endpoints.

    An empty client id or secret leaves the integration unconfigured rather
    than failing at startup.
    """

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    client_id: str = Field(
        default="", validation_alias=AliasChoices("client_id", "spotify_client_id")
    )
    client_secret: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("client_secret", "spotify_client_secret"),
    )
    redirect_uri: str = Field(
        default="http://127.0.0.1:8888/callback/spotify",
        validation_alias=AliasChoices("redirect_uri", "redirect_url"),
    )
    scope: str = SpotifyEndpoints.DEFAULT_SCOPE
    accounts_base_url: str = SpotifyEndpoints.ACCOUNTS_BASE_URL
    api_base_url: str = SpotifyEndpoints.API_BASE_URL
    request_timeout_s: float = Field(
        default=10.0,
        gt=0.0,
        le=120.0,
        validation_alias=AliasChoices("request_timeout_s", "timeout"),
    )

    @field_validator("scope", mode="before")
    @classmethod
    def normalize_scope(cls, v: str) -> str:
        """Accept comma- or space-separated scope lists."""
        if isinstance(v, str):
            return " ".join(v.replace(",", " ").split())
        return v

    @field_validator("accounts_base_url", "api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Spotify base URLs must start with http:// or https://")
        return v.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id.strip()) and bool(self.client_secret.get_secret_value().strip())


class TokenSettings(BaseModel):
    """Access-token lifecycle tuning."""

    model_config = SettingsConfigDict(frozen=True)

    refresh_skew_seconds: int = Field(default=300, ge=0, le=3600)
    refresh_retry_budget: int = Field(default=3, ge=1, le=20)


class PlaybackSettings(BaseModel):
    """Search and playback orchestration tuning."""

    model_config = SettingsConfigDict(frozen=True)

    search_limit: int = Field(default=15, ge=1, le=50)
    low_confidence_threshold: int = Field(default=30, ge=0)
    skip_settle_ms: int = Field(default=300, ge=0, le=5000)
    album_track_limit: int = Field(default=50, ge=1, le=50)
    playlist_limit: int = Field(default=50, ge=1, le=50)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - SPOTIFY__CLIENT_ID, SPOTIFY__CLIENT_SECRET, SPOTIFY__REDIRECT_URI, ...
    - TOKEN__REFRESH_SKEW_SECONDS, TOKEN__REFRESH_RETRY_BUDGET
    - PLAYBACK__SEARCH_LIMIT, PLAYBACK__SKIP_SETTLE_MS, ...
    - DATABASE__URL
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    spotify: SpotifySettings = Field(default_factory=SpotifySettings)
    token: TokenSettings = Field(default_factory=TokenSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels))
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
