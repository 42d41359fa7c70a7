"""Application configuration via environment variables."""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All release-bot configuration, loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- GitHub ---
    release_bot_github_token: str = Field(default="", description="GitHub token used for API calls")
    release_bot_webhook_secret: str = Field(default="", description="Shared secret for webhook signatures")
    release_bot_github_api_url: str = Field(default="https://api.github.com", description="GitHub REST API base URL")

    # --- App ---
    release_bot_debug: bool = Field(default=False, description="Toggle debug logging")
    release_bot_log_level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = Field(
        default="INFO", description="Log level when debug is off"
    )
    release_bot_host: str = Field(default="0.0.0.0", description="Interface to bind the HTTP server to")
    release_bot_port: int = Field(default=8080, description="Port to bind the HTTP server to")
    release_bot_reconcile_timeout: float = Field(
        default=300.0,
        description="Seconds allowed for all API calls made while handling one event",
    )

    @field_validator("release_bot_log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @property
    def log_level(self) -> int:
        if self.release_bot_debug:
            return logging.DEBUG
        return logging.getLevelName(self.release_bot_log_level)

    @property
    def webhook_secret(self) -> bytes:
        return self.release_bot_webhook_secret.encode()


def get_settings() -> Settings:
    """Create and return settings instance."""
    return Settings()
