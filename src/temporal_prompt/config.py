"""Configuration management for Temporal Prompt.

This module handles library configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from temporal_prompt.models import Strategy


class Settings(BaseSettings):
    """Library settings with environment variable support.

    All settings can be overridden via environment variables with
    the TEMPORAL_PROMPT_ prefix (e.g., TEMPORAL_PROMPT_TIMEZONE).
    """

    model_config = SettingsConfigDict(
        env_prefix="TEMPORAL_PROMPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Calendar Configuration
    timezone: str | None = Field(
        default=None,
        description=(
            "IANA timezone used to resolve and render dates. "
            "When unset, the system timezone is used (UTC if it cannot be detected)."
        ),
    )
    locale: str = Field(
        default="en-US",
        description="BCP 47 locale tag attached to the calendar context",
    )

    # Enhancement Configuration
    strategy: Strategy = Field(
        default=Strategy.HYBRID,
        description="Default rewriting strategy (preserve, normalize, hybrid)",
    )
    include_context: bool = Field(
        default=True,
        description="Whether enhance() generates a current-date context header",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached library settings.

    Returns:
        Settings: Library settings instance.
    """
    return Settings()
