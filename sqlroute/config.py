"""
Configuration settings for sqlroute.

Uses Pydantic Settings to load environment variables for the default database
connection, the named read/write replicas, and logging behavior.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Default connection
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("sqlroute", alias="DB_NAME")
    db_dsn: Optional[str] = Field(None, alias="DB_DSN")
    db_connect_timeout: int = Field(10, alias="DB_CONNECT_TIMEOUT")

    # Replicas, as JSON objects of name -> DSN
    db_read_dsns: Dict[str, str] = Field(default_factory=dict, alias="DB_READ_DSNS")
    db_write_dsns: Dict[str, str] = Field(default_factory=dict, alias="DB_WRITE_DSNS")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")
    log_queries: bool = Field(False, alias="LOG_QUERIES")

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
