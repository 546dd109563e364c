"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    taskweave_log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    taskweave_debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    taskweave_log_dir: str | None = Field(
        default=None,
        description="Directory for rotating log files (disabled when unset)",
    )

    # Watch task
    taskweave_beep: bool = Field(
        default=False,
        description="Beep when watch-triggered runs finish",
    )
    taskweave_watch_delay: float = Field(
        default=0.0,
        ge=0.0,
        description="Debounce delay for filesystem events in seconds",
    )
    taskweave_beep_grace: float = Field(
        default=0.01,
        ge=0.0,
        description="Seconds to wait after a watched run before beeping",
    )

    # Pipelines
    taskweave_default_dest: str = Field(
        default=".",
        description="Destination used by pipelines that do not set one",
    )

    # CLI
    taskweave_taskfile: str = Field(
        default="taskfile.py",
        description="Python module defining the `tasks` mapping",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from environment.

    Example:
        >>> settings = get_settings()
        >>> settings.taskweave_default_dest
        '.'
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
