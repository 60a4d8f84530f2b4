"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"

_ISOLATION_LEVELS = {
    "AUTOCOMMIT",
    "READ COMMITTED",
    "READ UNCOMMITTED",
    "REPEATABLE READ",
    "SERIALIZABLE",
}


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./rate_rules.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    database_isolation_level: str | None = Field(
        default=None,
        description=(
            "Transaction isolation level for rule writes. SERIALIZABLE turns the "
            "repository overlap re-check into an at-most-one-winner guarantee"
        ),
    )
    database_echo: bool = Field(
        default=False, description="Log every SQL statement emitted by SQLAlchemy"
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    @field_validator("database_isolation_level")
    @classmethod
    def _validate_isolation_level(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        normalized = " ".join(value.replace("_", " ").split()).upper()
        if normalized not in _ISOLATION_LEVELS:
            raise ValueError(
                "DATABASE_ISOLATION_LEVEL must be one of: "
                + ", ".join(sorted(_ISOLATION_LEVELS))
            )
        return normalized

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError("LOG_LEVEL must be a standard logging level name")
        return normalized


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
