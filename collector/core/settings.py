from __future__ import annotations

from datetime import timedelta

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from collector.core.errors import ConfigurationError
from collector.core.identity import COOKIE_NAME_RE


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="COLLECTOR_", extra="ignore", frozen=True)

    party_cookie: str = Field(default="_dvp")
    party_timeout: timedelta = Field(default=timedelta(days=730))
    session_cookie: str = Field(default="_dvs")
    session_timeout: timedelta = Field(default=timedelta(minutes=30))
    cookie_domain: str | None = Field(default=None)

    event_path: str = Field(default="/event")

    pool_partitions: int = Field(default=2, gt=0)
    max_write_queue: int = Field(default=100, gt=0)
    max_enqueue_delay: timedelta = Field(default=timedelta(seconds=1))

    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_stream: str = Field(default="collector:events")
    redis_stream_maxlen: int = Field(default=100_000, gt=0)

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8290)
    log_level: str = Field(default="INFO")

    @field_validator("party_cookie", "session_cookie")
    @classmethod
    def _check_cookie_name(cls, v: str) -> str:
        if not COOKIE_NAME_RE.fullmatch(v):
            raise ValueError(f"invalid cookie name: {v!r}")
        return v

    @field_validator("party_timeout", "session_timeout")
    @classmethod
    def _check_timeout(cls, v: timedelta) -> timedelta:
        if v.total_seconds() < 1:
            raise ValueError("cookie timeout must be at least one second")
        return v

    @field_validator("max_enqueue_delay")
    @classmethod
    def _check_delay(cls, v: timedelta) -> timedelta:
        if v.total_seconds() < 0:
            raise ValueError("max_enqueue_delay must not be negative")
        return v

    @field_validator("event_path")
    @classmethod
    def _check_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"event_path must start with '/': {v!r}")
        return v


def load_settings(**overrides) -> Settings:
    """Build settings from the environment; any invalid value is fatal."""
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"invalid collector configuration: {e}") from e
