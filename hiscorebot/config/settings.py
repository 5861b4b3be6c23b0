"""
Configuration settings using Pydantic Settings.

All sensitive configuration must be loaded from environment variables.
Never hardcode tokens or credentials in the code.
"""

import json
from typing import Annotated, Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # .env values take precedence over host environment variables.
    # Order: init kwargs > .env (dotenv) > env vars > file secrets
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ):
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    # Hiscore service
    hiscore_base_url: str = Field("https://secure.runescape.com", alias="HISCORE_BASE_URL")
    hiscore_timeout_seconds: float | None = Field(
        None,
        alias="HISCORE_TIMEOUT_SECONDS",
        description="Total request timeout; unset keeps the aiohttp default",
    )

    # Discord Configuration
    discord_bot_token: str | None = Field(
        None, validation_alias=AliasChoices("DISCORD_BOT_TOKEN", "DISCORD_TOKEN")
    )
    bot_prefix: str = Field("!", alias="BOT_PREFIX")
    bot_ignored_users: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["streamelements"],
        alias="BOT_IGNORED_USERS",
        description="Comma-separated logins (a JSON array also works)",
    )

    # Database Configuration
    database_url: str = Field("postgresql://localhost/hiscorebot", alias="DATABASE_URL")
    database_pool_size: int = Field(10, alias="DATABASE_POOL_SIZE")
    database_pool_timeout: int = Field(30, alias="DATABASE_POOL_TIMEOUT")

    # REST API
    api_host: str = Field("0.0.0.0", alias="API_HOST")
    api_port: int = Field(7373, alias="API_PORT")

    # Application Configuration
    app_env: str = Field("development", alias="APP_ENV")
    app_debug: bool = Field(False, alias="APP_DEBUG")
    app_log_level: str = Field("INFO", alias="APP_LOG_LEVEL")

    @field_validator("bot_ignored_users", mode="before")
    @classmethod
    def split_ignored_users(cls, value: Any) -> Any:
        if isinstance(value, str):
            if value.strip().startswith("["):
                return json.loads(value)
            return [u.strip() for u in value.split(",") if u.strip()]
        return value


# Global settings instance loaded from the environment.
# Secrets are optional here and validated by main.health_check at startup.
settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the global settings instance.

    This function provides dependency injection support for settings.
    """
    return settings
