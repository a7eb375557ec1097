"""
Application configuration models and helpers.

Settings are read from the environment (and an optional ``.env`` file) once per
process and handed to routes and clients through FastAPI dependencies, so no
handler looks up environment variables on its own.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


DEFAULT_FACEBOOK_SCOPES: tuple[str, ...] = (
    "public_profile",
    "pages_manage_posts",
    "pages_read_engagement",
    "pages_show_list",
)


class FacebookSettings(BaseSettings):
    """Configuration required for the Facebook Login and Graph API calls."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    app_id: str = Field(..., validation_alias="FB_APP_ID")
    app_secret: str = Field(..., validation_alias="FB_APP_SECRET")
    redirect_uri: str = Field(
        ...,
        validation_alias="FB_REDIRECT_URI",
        description="Callback URL registered with the Facebook app.",
    )
    graph_api_version: str = Field("v23.0", validation_alias="FB_GRAPH_API_VERSION")
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        DEFAULT_FACEBOOK_SCOPES,
        validation_alias="FB_OAUTH_SCOPES",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())


class AutomationSettings(BaseSettings):
    """Settings for the external automation workflow that publishes posts."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    webhook_url: str = Field(..., validation_alias="N8N_WEBHOOK_URL")
    internal_api_key: str = Field(
        ...,
        validation_alias="INTERNAL_API_KEY",
        description="Shared secret sent and checked in the x-internal-key header.",
    )
    expose_token_endpoint: bool = Field(
        True,
        validation_alias="INTERNAL_TOKEN_ENDPOINT_ENABLED",
        description="Mount /internal/user-token for the automation system.",
    )


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(populate_by_name=True, extra="ignore")

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting stored tokens."
        ),
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    host: str = Field("0.0.0.0", validation_alias="HOST")
    port: int = Field(5000, validation_alias="PORT")
    database_path: str = Field(
        "data/page_relay.db",
        validation_alias="DATABASE_PATH",
        description="SQLite file holding user identity records.",
    )
    frontend_base_url: str = Field(
        ...,
        validation_alias="FRONTEND_URL",
        description="Front-end origin; users land on its /dashboard after login.",
    )
    http_timeout_seconds: float = Field(10.0, validation_alias="HTTP_TIMEOUT_SECONDS")
    facebook: FacebookSettings = Field(default_factory=FacebookSettings)
    automation: AutomationSettings = Field(default_factory=AutomationSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)

    @field_validator("frontend_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "AutomationSettings",
    "DEFAULT_FACEBOOK_SCOPES",
    "FacebookSettings",
    "SecuritySettings",
    "get_settings",
]
