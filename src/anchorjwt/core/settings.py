"""
Configuration models for anchorjwt using Pydantic v2 Settings.

All tunables of the trusted clock live here so they can be overridden from the
environment (``ANCHORJWT_`` prefix, ``__`` nested delimiter) or passed
explicitly when constructing a clock.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import (  # type: ignore[import-not-found]
    BaseSettings,
    SettingsConfigDict,
)

from .errors import ConfigurationError

LATEST_CONFIG_SCHEMA_VERSION = "1.0"

DEFAULT_NTP_SERVERS: tuple[str, ...] = (
    "ntp.aliyun.com",
    "ntp.tencent.com",
    "ntp.ntsc.ac.cn",
    "cn.pool.ntp.org",
    "time.google.com",
    "time.apple.com",
    "time.cloudflare.com",
    "time.windows.com",
    "pool.ntp.org",
)

SYNC_INTERVAL_MS = 3600 * 1000
RETRY_INTERVAL_MS = 60 * 1000
MAX_TIME_OFFSET_MS = 24 * 3600 * 1000
NTP_TIMEOUT_SECONDS = 3.0


class CoreSettings(BaseModel):
    """Package-wide behavior toggles."""

    internal_logging_enabled: bool = Field(
        default=False,
        description="Emit DEBUG/WARN diagnostics for contained internal errors",
    )


class ClockSettings(BaseModel):
    """Trusted clock synchronization policy."""

    servers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_NTP_SERVERS),
        min_length=1,
        description="NTP servers queried in priority order",
    )
    sync_interval_ms: int = Field(
        default=SYNC_INTERVAL_MS,
        gt=0,
        description="Resynchronize when the last sync is older than this",
    )
    retry_interval_ms: int = Field(
        default=RETRY_INTERVAL_MS,
        gt=0,
        description="Delay before retrying after every server failed",
    )
    max_offset_ms: int = Field(
        default=MAX_TIME_OFFSET_MS,
        gt=0,
        description="Largest plausible server-minus-local offset",
    )
    server_timeout_seconds: float = Field(
        default=NTP_TIMEOUT_SECONDS,
        gt=0.0,
        description="Per-server query timeout",
    )
    ntp_version: int = Field(default=3, ge=1, le=4, description="NTP version")
    executor_max_workers: int = Field(
        default=4,
        ge=1,
        description="Threads in the shared executor for blocking NTP queries",
    )

    @field_validator("servers", mode="before")
    @classmethod
    def _coerce_servers(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("servers")
    @classmethod
    def _strip_servers(cls, value: list[str]) -> list[str]:
        cleaned = [s.strip() for s in value if s and s.strip()]
        if not cleaned:
            raise ValueError("servers must contain at least one host")
        return cleaned

    @model_validator(mode="after")
    def _retry_within_sync(self) -> ClockSettings:
        if self.retry_interval_ms > self.sync_interval_ms:
            raise ValueError("retry_interval_ms must not exceed sync_interval_ms")
        return self


class TokenSettings(BaseModel):
    """Defaults for command-line token issuance."""

    identifier: str | None = Field(default=None, description="api_key claim")
    secret: SecretStr | None = Field(default=None, description="Shared HMAC secret")


class Settings(BaseSettings):
    """Top-level configuration model."""

    schema_version: str = Field(default=LATEST_CONFIG_SCHEMA_VERSION)

    core: CoreSettings = Field(default_factory=CoreSettings)
    clock: ClockSettings = Field(default_factory=ClockSettings)
    token: TokenSettings = Field(default_factory=TokenSettings)

    model_config = SettingsConfigDict(
        env_prefix="ANCHORJWT_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_dict(self) -> dict[str, object]:
        from typing import cast

        return cast(
            dict[str, object],
            self.model_dump(by_alias=True, exclude_none=True),
        )


def load_settings(**overrides: Any) -> Settings:
    """Build settings from the environment plus explicit overrides.

    Raises:
        ConfigurationError: If validation fails.
    """
    try:
        return Settings(**overrides)
    except Exception as e:
        raise ConfigurationError(f"Invalid configuration: {e}", cause=e) from e
