"""Environment-driven configuration helpers for Parlay League."""

from __future__ import annotations

import os
from datetime import date
from functools import lru_cache

from pydantic import AnyUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or .env files."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: AnyUrl | str = Field(default="sqlite:///./parlayleague.db")
    log_level: str = Field(default="INFO")

    jwt_secret: str = Field(default="", validation_alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=60, ge=1)

    odds_api_key: str = Field(default="", validation_alias="ODDS_API_KEY")
    odds_api_base_url: str = Field(default="https://api.the-odds-api.com")
    odds_cache_ttl_seconds: float = Field(default=300.0, ge=0.0)
    odds_request_pause_seconds: float = Field(default=0.3, ge=0.0)
    season_start_sunday_et: date = Field(default=date(2025, 9, 7))

    lock_settled_parlays: bool = Field(default=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()  # type: ignore[call-arg]


def get_jwt_secret() -> str:
    """Return the token signing secret or raise a helpful error."""

    secret = os.getenv("JWT_SECRET") or get_settings().jwt_secret
    if not secret:
        raise RuntimeError(
            "JWT_SECRET is not configured. "
            "Set it in .env for local dev or in the deployment environment."
        )
    return secret


def get_odds_api_key() -> str:
    key = os.getenv("ODDS_API_KEY") or get_settings().odds_api_key
    if not key:
        raise RuntimeError("ODDS_API_KEY is not configured on the server.")
    return key
