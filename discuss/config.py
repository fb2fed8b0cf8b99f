"""Application configuration."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseModel):
    """Comment store API configuration."""

    # Base URL of the comment service (no trailing slash)
    base_url: str = "http://localhost:3000"

    # Transport timeout; expiry surfaces as a NetworkError
    timeout_seconds: float = 30.0


class CommentSettings(BaseModel):
    """Comment engine tuning."""

    # Page size for scope queries
    page_size: int = Field(default=10, ge=1)

    # Page size for the recent comments feed
    recent_page_size: int = Field(default=5, ge=1)

    # Page size when fetching more replies for a thread
    reply_page_size: int = Field(default=10, ge=1)

    # Threads with at most this many replies start expanded
    reply_expand_threshold: int = Field(default=3, ge=0)

    # Longest comment the write path accepts
    max_content_length: int = Field(default=2000, ge=1)

    # Cached pages older than this are refetched on next access
    stale_after_seconds: float = Field(default=300.0, ge=0)


class AuthSettings(BaseModel):
    """Identity configuration.

    The engine does not issue credentials. A bearer token obtained elsewhere
    can be supplied here (AUTH__TOKEN) for headless use.
    """

    token: str | None = None


class ObservabilitySettings(BaseModel):
    """Observability configuration for Logfire."""

    # Logfire API token (optional - if not set, logs only go to console)
    # Can be set via OBSERVABILITY__LOGFIRE_TOKEN env var
    logfire_token: str | None = None

    # Whether to send telemetry to Logfire cloud
    # If None, will auto-determine: sends if token is present, otherwise console-only
    send_to_logfire: bool | None = None


class Settings(BaseSettings):
    """Application settings.

    Set environment variables to override, using ``__`` for nesting:

        API__BASE_URL=https://comments.example.com
        COMMENTS__PAGE_SIZE=20
        AUTH__TOKEN=...
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    environment: Literal["test", "development", "staging", "production"] = "development"
    debug: bool = False

    # Nested settings
    api: ApiSettings = ApiSettings()
    comments: CommentSettings = CommentSettings()
    auth: AuthSettings = AuthSettings()
    observability: ObservabilitySettings = ObservabilitySettings()
