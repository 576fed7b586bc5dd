"""Configuration management for the Google Drive / Sheets connector.

Uses Pydantic settings for validation and environment variable loading.
"""

from typing import Optional, Literal
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrySettings(BaseSettings):
    """User-facing retry settings shared by every remote call."""

    model_config = SettingsConfigDict(env_prefix="RETRY_")

    max_retry_count: int = Field(
        default=8,
        ge=0,
        description="Maximum number of retries for transient API errors",
    )
    max_retry_wait: int = Field(
        default=200,
        ge=1,
        description="Maximum wait between retries in seconds",
    )
    max_retry_jitter_wait: int = Field(
        default=100,
        ge=0,
        description="Maximum random jitter added to each wait in milliseconds",
    )


class GoogleAPIConfig(BaseSettings):
    """Google Drive and Sheets API configuration."""

    model_config = SettingsConfigDict(env_prefix="GDRIVE_")

    drive_base_url: str = Field(
        default="https://www.googleapis.com/drive/v3",
        description="Google Drive API v3 base URL",
    )
    upload_base_url: str = Field(
        default="https://www.googleapis.com/upload/drive/v3",
        description="Google Drive API v3 upload URL",
    )
    sheets_base_url: str = Field(
        default="https://sheets.googleapis.com/v4",
        description="Google Sheets API v4 base URL",
    )
    api_timeout_seconds: float = Field(
        default=30.0,
        description="API request timeout in seconds",
    )
    page_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Files per listing page (max 1000)",
    )
    listing_fields: str = Field(
        default="nextPageToken, files(id, name, mimeType, size, modifiedTime)",
        description="Fields requested for each listing page",
    )
    include_shared_drives: bool = Field(
        default=False,
        description="Include shared drive items in listings",
    )


class GoogleAuthConfig(BaseSettings):
    """OAuth 2.0 credentials used to build API clients."""

    model_config = SettingsConfigDict(env_prefix="GOOGLE_")

    client_id: str = Field(default="", description="OAuth2 client id")
    client_secret: str = Field(default="", description="OAuth2 client secret")
    refresh_token: str = Field(default="", description="OAuth2 refresh token")
    access_token: Optional[str] = Field(
        default=None,
        description="OAuth2 access token; refreshed on first use when absent",
    )


class LoggingConfig(BaseSettings):
    """Structured logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )
    format: Literal["json", "text"] = Field(
        default="json",
        description="Log format",
    )

    @field_validator("level", mode="before")
    def normalize_level(cls, v: str) -> str:
        """Accept lower-case level names from the environment."""
        return v.upper() if isinstance(v, str) else v


class Settings(BaseSettings):
    """Root settings container."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )

    service_name: str = Field(
        default="google-drive-sheets-connector",
        description="Service name for observability",
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    google_api: GoogleAPIConfig = Field(default_factory=GoogleAPIConfig)
    auth: GoogleAuthConfig = Field(default_factory=GoogleAuthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
