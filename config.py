"""
Centralised settings loader.

Reads the environment (and an optional `.env`) once and caches the result.
"""

from __future__ import annotations
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ------------------------------------------------------------------ #
#  Master settings model
# ------------------------------------------------------------------ #
class _Settings(BaseSettings):
    # ─── runtime ────────────────────────────────────────────────────
    env_name: str = Field("local", validation_alias="ENV_NAME")
    log_level: str = Field("INFO", validation_alias="LOG_LEVEL")

    # ─── storage ────────────────────────────────────────────────────
    # neither URL nor Cloud SQL instance set → no storage, every request 401s
    database_url: str | None = Field(None, validation_alias="DATABASE_URL")
    cloud_sql_instance: str | None = Field(None, validation_alias="CLOUD_SQL_CONNECTION_NAME")
    db_user: str | None = Field(None, validation_alias="DB_USER")
    db_pass: str | None = Field(None, validation_alias="DB_PASS")
    db_name: str | None = Field(None, validation_alias="DB_NAME")
    sql_echo: bool = Field(False, validation_alias="SQL_ECHO")

    # allow other teammates’ env-vars without crashing
    model_config = SettingsConfigDict(
        extra="ignore", env_file=".env", env_file_encoding="utf-8"
    )


# ------------------------------------------------------------------ #
#  Cached singleton accessor
# ------------------------------------------------------------------ #
@lru_cache
def _cached() -> _Settings:  # pragma: no cover
    return _Settings()  # type: ignore[call-arg]


settings: _Settings = _cached()
