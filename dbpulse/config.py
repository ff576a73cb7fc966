"""
Configuration settings for dbpulse.

Uses Pydantic Settings to load environment variables for the database file,
logging, workload timing, the result cache, and the HTTP server. SQLite
pragmas are not settings; they live as constants in the storage layer.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_path: str = Field("database.sqlite", alias="DB_PATH")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Workload
    phase_seconds: float = Field(5.0, ge=0, alias="WORKLOAD_PHASE_SECONDS")
    batch_size: int = Field(10, gt=0, alias="WORKLOAD_BATCH_SIZE")
    retention_seconds: int = Field(600, ge=0, alias="RECORD_RETENTION_SECONDS")

    # Result cache
    cache_ttl_seconds: int = Field(300, ge=0, alias="CACHE_TTL_SECONDS")

    # HTTP
    http_host: str = Field("0.0.0.0", alias="HTTP_HOST")
    http_port: int = Field(3005, alias="PORT")

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
