"""
Process-wide configuration, read once from the environment (or `.env`).

`main.create_app()` builds a `Settings` and stores it on `app.state`; handlers
get it through `get_settings`.
"""

from __future__ import annotations

import re
from datetime import timedelta

from fastapi import Request
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(raw: str | int) -> timedelta:
    """
    Parse "90", "15m", "24h" or "7d" into a timedelta (bare numbers are seconds).
    """
    if isinstance(raw, int):
        return timedelta(seconds=raw)
    match = _DURATION_RE.match(str(raw).lower())
    if match is None:
        raise ValueError(f"Invalid duration: {raw!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _DURATION_UNITS[unit])


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 3001
    environment: str = Field(default="development", pattern=r"^(development|test|staging|production)$")
    log_level: str = "INFO"

    # PostgreSQL (asyncpg DSN)
    database_url: str
    db_pool_min_size: int = Field(default=1, ge=1)
    db_pool_max_size: int = Field(default=10, ge=1)
    db_command_timeout: float = Field(default=30.0, gt=0)
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    # Auth
    jwt_secret: SecretStr
    jwt_algorithm: str = "HS256"
    jwt_expire: str = "24h"
    jwt_refresh_expire: str = "7d"

    # HTTP
    api_version: str = "v1"
    cors_origin: str = "http://localhost:3000"
    rate_limit_enabled: bool = True
    rate_limit_window_ms: int = Field(default=15 * 60 * 1000, ge=1000)
    rate_limit_max_requests: int = Field(default=100, ge=1)

    @field_validator("jwt_secret")
    @classmethod
    def _check_secret(cls, value: SecretStr) -> SecretStr:
        if len(value.get_secret_value().strip()) < 16:
            raise ValueError("JWT_SECRET must be at least 16 characters")
        return value

    @field_validator("jwt_expire", "jwt_refresh_expire")
    @classmethod
    def _check_duration(cls, value: str) -> str:
        parse_duration(value)
        return value

    @property
    def api_prefix(self) -> str:
        return f"/api/{self.api_version}"

    @property
    def access_token_ttl(self) -> timedelta:
        return parse_duration(self.jwt_expire)

    @property
    def refresh_token_ttl(self) -> timedelta:
        return parse_duration(self.jwt_refresh_expire)

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origin.split(",") if o.strip()]

    @property
    def rate_limit(self) -> str:
        # limits-style string, e.g. "100/900 seconds"
        window_s = max(1, self.rate_limit_window_ms // 1000)
        return f"{self.rate_limit_max_requests}/{window_s} seconds"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
