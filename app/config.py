"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./notifications.db",
        description="Async SQLAlchemy URL for the notification database",
        min_length=1,
    )
    secret_key: str = Field(
        default="change-me",
        description="Secret key for signing JWT tokens",
        min_length=1,
    )
    access_token_algorithm: str = Field(
        default="HS256", description="Algorithm used to sign access tokens"
    )
    access_token_expire_minutes: int = Field(
        default=60, description="Lifetime of access tokens in minutes", gt=0
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending notification emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of notification emails",
        min_length=3,
    )
    site_url: str = Field(
        default="http://localhost:3000",
        description="Public URL of the web client, used to build deep links",
    )
    site_name: str = Field(default="Marketplace", description="Display name of the site")
    app_timezone: str = Field(
        default="UTC", description="Timezone used when stamping notification rows"
    )
    delivery_timeout_seconds: float = Field(
        default=15.0,
        description="Upper bound for a single push, email or webhook delivery call; 0 disables it",
    )
    webhook_timeout_seconds: float = Field(
        default=10.0, description="HTTP timeout for a single webhook request", gt=0
    )
    email_background_delivery: bool = Field(
        default=False,
        description="Schedule notification emails as background tasks instead of sending inline",
    )

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
