"""Configuration management for molchat."""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL = "gemini:gemini-1.5-flash"


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="MOLCHAT_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    api_key: str | None = Field(default=None, description="API key for the language-model provider")
    model: str = Field(default=DEFAULT_MODEL, description="Model in provider:model form")
    api_base: str | None = Field(default=None, description="Optional API base URL")
    max_tokens: int = Field(default=1024, ge=1, description="Maximum tokens for responses")
    timeout_seconds: int = Field(default=30, ge=1, description="Timeout for model responses in seconds")

    # Viewer Configuration
    click_grace_seconds: float = Field(
        default=0.1,
        ge=0,
        description="Delay before reading the selection after a click event",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Log level")


def load_settings(**overrides: Any) -> Settings:
    """Load settings from environment and apply non-empty overrides."""

    settings = Settings()
    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    return settings
