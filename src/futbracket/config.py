"""
Configuration management for futbracket.

Uses Pydantic Settings to load configuration from environment variables
(prefixed with FUTBRACKET_) with sensible defaults. The engine only reads
these values; nothing here changes between calls to assemble().

Usage:
    from futbracket.config import settings
    print(settings.placeholder_team_name)
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings loaded from environment variables.

    Environment variables can be set directly or via a .env file
    in the project root directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="FUTBRACKET_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # ==========================================================================
    # Bracket Configuration
    # ==========================================================================

    fallback_round_count: int = Field(
        default=4,
        description=(
            "Rounds kept when no listed round reaches the Round of 16. "
            "See rounds.select_rounds for the fallback rule."
        ),
    )
    placeholder_team_name: str = Field(
        default="TBD",
        description="Display name used for both sides of a placeholder tie",
    )

    # ==========================================================================
    # Logging Configuration
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_format: str = Field(
        default="console",
        description="Log format: 'json' for production, 'console' for dev",
    )

    # ==========================================================================
    # Validators
    # ==========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper_v

    @field_validator("fallback_round_count")
    @classmethod
    def validate_fallback_round_count(cls, v: int) -> int:
        if v < 1:
            raise ValueError("fallback_round_count must be at least 1")
        return v


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures we only load settings once,
    which is important because loading from .env can be slow.
    """
    return Settings()


# Convenience alias for importing
settings = get_settings()
