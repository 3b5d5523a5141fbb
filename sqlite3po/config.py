"""
Configuration settings for sqlite3po.

Uses Pydantic Settings to load environment variables for the database file,
connection behaviour, identity-map eviction policy and logging.
"""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    database_path: str = Field(":memory:", alias="SQLITE3PO_DATABASE")
    connect_timeout: float = Field(5.0, alias="SQLITE3PO_CONNECT_TIMEOUT")
    connect_attempts: int = Field(3, alias="SQLITE3PO_CONNECT_ATTEMPTS")

    # ORM
    optimistic_eviction: bool = Field(False, alias="SQLITE3PO_OPTIMISTIC_EVICTION")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    json_logs: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
