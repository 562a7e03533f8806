# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

Settings are loaded from environment variables (and an optional .env file)
with sensible defaults. Both command line tools reach the database through
the single DATABASE_URL connection string.

Example:
    >>> from curriculum_sync.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.database.async_url)
    'postgresql+asyncpg://localhost:5432/curriculum'
"""

from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "postgresql+asyncpg://localhost:5432/curriculum"

# Plain driver-less URLs (as written by most hosting providers) are mapped
# onto the async driver SQLAlchemy needs.
_ASYNC_DRIVERS = {
    "postgres://": "postgresql+asyncpg://",
    "postgresql://": "postgresql+asyncpg://",
    "sqlite://": "sqlite+aiosqlite://",
}


def _bundled_curriculum_file() -> Path:
    """Locate the curriculum file shipped inside the package."""
    return Path(str(resources.files("curriculum_sync.content") / "java_fundamentals.yaml"))


class DatabaseSettings(BaseSettings):
    """Database connection configuration.

    Attributes:
        url: Connection string read from DATABASE_URL.
        echo: Echo SQL statements (debugging only).
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
    )

    url: str = Field(
        default=DEFAULT_DATABASE_URL,
        validation_alias="DATABASE_URL",
    )
    echo: bool = Field(
        default=False,
        validation_alias="DATABASE_ECHO",
    )

    @property
    def async_url(self) -> str:
        """Return the connection URL with an async driver selected."""
        for prefix, replacement in _ASYNC_DRIVERS.items():
            if self.url.startswith(prefix):
                return replacement + self.url[len(prefix):]
        return self.url


class ContentSettings(BaseSettings):
    """Authored curriculum content configuration.

    Attributes:
        file: Path to the authored course file (YAML or JSON).
        strict_question_types: Treat unknown question type tags as
            validation errors instead of falling back to FULL_PROGRAM.
    """

    model_config = SettingsConfigDict(
        env_prefix="CURRICULUM_",
        extra="ignore",
    )

    file: Path = Field(default_factory=_bundled_curriculum_file)
    strict_question_types: bool = False


class Settings(BaseSettings):
    """Main settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        database: Database settings.
        content: Authored content settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    content: ContentSettings = Field(default_factory=ContentSettings)

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing.
    """
    get_settings.cache_clear()
