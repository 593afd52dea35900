#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
retort streaming service. All configuration is centralized here to ensure
consistency across modules.

Values come from the environment or a .env file. A missing API key is not a
load error: the service starts and answers argue requests with 500 until
the key is set.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_model_list(raw: str) -> tuple[str, ...]:
    """
    Split a comma-separated model list into an ordered tuple.

    Entries are trimmed and empty entries dropped. Order is preserved and
    duplicates are kept, the list is consumed exactly as written.
    """
    return tuple(item.strip() for item in raw.split(",") if item.strip())


class LLMProviderSettings(BaseSettings):
    """
    Completion provider configuration.

    STAGE-0.2: Provider configuration
    """

    OPENROUTER_API_KEY: str | None = Field(default=None, description="OpenRouter API key")
    OPENROUTER_BASE_URL: str = Field(
        default="https://openrouter.ai/api/v1", description="OpenRouter base URL"
    )
    OPENROUTER_MODEL: str = Field(
        default="deepseek/deepseek-chat-v3.1:free", description="Primary model identifier"
    )
    OPENROUTER_MODELS: str | None = Field(
        default=None, description="Comma-separated fallback chain (overrides the default chain)"
    )
    OPENROUTER_TIMEOUT: float = Field(default=60.0, description="Provider request timeout")
    OPENROUTER_APP_TITLE: str = Field(default="Chaojia", description="X-Title header value")
    DEFAULT_REFERER: str = Field(
        default="https://localhost-placeholder", description="HTTP-Referer when the caller sends no Origin"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """
    General application settings.

    STAGE-0: Application initialization
    """

    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    APP_NAME: str = Field(default="Retort Streaming Service", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    API_BASE_PATH: str = Field(default="/api", description="Prefix for all API routes")
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")
    OPPONENT_LINE_MAX_LENGTH: int = Field(default=800, description="Max opponent line length")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from retort.core.config.settings import get_settings

        settings = get_settings()
        models = settings.model_candidates
        api_key = settings.llm.OPENROUTER_API_KEY
    """

    # Provider settings
    OPENROUTER_API_KEY: str | None = Field(default=None, description="OpenRouter API key")
    OPENROUTER_BASE_URL: str = Field(
        default="https://openrouter.ai/api/v1", description="OpenRouter base URL"
    )
    OPENROUTER_MODEL: str = Field(
        default="deepseek/deepseek-chat-v3.1:free", description="Primary model identifier"
    )
    OPENROUTER_MODELS: str | None = Field(
        default=None, description="Comma-separated fallback chain (overrides the default chain)"
    )
    OPENROUTER_TIMEOUT: float = Field(default=60.0, description="Provider request timeout")
    OPENROUTER_APP_TITLE: str = Field(default="Chaojia", description="X-Title header value")
    DEFAULT_REFERER: str = Field(
        default="https://localhost-placeholder", description="HTTP-Referer when the caller sends no Origin"
    )

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    APP_NAME: str = Field(default="Retort Streaming Service", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    API_BASE_PATH: str = Field(default="/api", description="Prefix for all API routes")
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")
    OPPONENT_LINE_MAX_LENGTH: int = Field(default=800, description="Max opponent line length")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("OPENROUTER_APP_TITLE")
    @classmethod
    def validate_app_title(cls, v):
        """HTTP headers must stay within Latin-1; the title is restricted to ASCII."""
        if not v.isascii():
            raise ValueError("OPENROUTER_APP_TITLE must be ASCII")
        return v

    @property
    def model_candidates(self) -> tuple[str, ...]:
        """Ordered fallback chain: explicit override, else primary model then openrouter/auto."""
        raw = self.OPENROUTER_MODELS or f"{self.OPENROUTER_MODEL},openrouter/auto"
        return parse_model_list(raw)

    # Nested configuration views
    @property
    def llm(self) -> LLMProviderSettings:
        """Get provider settings."""
        return LLMProviderSettings(
            OPENROUTER_API_KEY=self.OPENROUTER_API_KEY,
            OPENROUTER_BASE_URL=self.OPENROUTER_BASE_URL,
            OPENROUTER_MODEL=self.OPENROUTER_MODEL,
            OPENROUTER_MODELS=self.OPENROUTER_MODELS,
            OPENROUTER_TIMEOUT=self.OPENROUTER_TIMEOUT,
            OPENROUTER_APP_TITLE=self.OPENROUTER_APP_TITLE,
            DEFAULT_REFERER=self.DEFAULT_REFERER,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> ApplicationSettings:
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
            API_BASE_PATH=self.API_BASE_PATH,
            CORS_ORIGINS=self.CORS_ORIGINS,
            OPPONENT_LINE_MAX_LENGTH=self.OPPONENT_LINE_MAX_LENGTH,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    STAGE-0.3: Settings initialization
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
