"""Application configuration and environment management."""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from clockboard.config.timezones import FIXED_REFERENCE_TIMEZONE, UTC_TIMEZONE

load_dotenv()

MAX_TRACKED_CLOCKS = 8


def _detect_timezone() -> str:
    tz_env = os.environ.get("TZ") or os.environ.get("LOCAL_TIMEZONE")
    if tz_env:
        return tz_env

    try:
        import tzlocal

        return tzlocal.get_localzone_name() or UTC_TIMEZONE
    except Exception:
        return UTC_TIMEZONE


class Settings(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    app_name: str = Field(default="Clockboard", description="Human readable app name")
    environment: str = Field(default="development", description="Runtime environment name")

    data_dir: Path = Field(default=Path("data"), description="Directory for persistent data")
    database_url: str = Field(
        default="sqlite:///data/clockboard.db",
        description="SQLAlchemy connection string for the preference store",
    )

    local_timezone: str = Field(
        default_factory=_detect_timezone,
        description="Olson identifier of the host zone shown as the local clock",
    )
    display_locale: str = Field(default="en_US", description="Locale used for zone names and offsets")
    max_clocks: int = Field(default=MAX_TRACKED_CLOCKS, ge=1, le=MAX_TRACKED_CLOCKS)
    tick_interval_seconds: float = Field(default=1.0, gt=0, description="Seconds between render passes")
    log_level: str = Field(default="INFO")

    @field_validator("local_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        if value in {UTC_TIMEZONE, FIXED_REFERENCE_TIMEZONE}:
            return value
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone '{value}'") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        value_upper = value.upper()
        if value_upper not in allowed:
            raise ValueError(f"Unknown log level '{value}'")
        return value_upper

    def database_path(self) -> Path:
        if self.database_url.startswith("sqlite"):
            if "///" in self.database_url:
                path = self.database_url.split("///", 1)[1]
            else:
                path = self.database_url.split(":", 1)[-1]
            return Path(path)
        raise ValueError("Database path only available for sqlite URLs")


_ENV_MAPPING = {
    "APP_NAME": "app_name",
    "ENVIRONMENT": "environment",
    "DATA_DIR": "data_dir",
    "DATABASE_URL": "database_url",
    "LOCAL_TIMEZONE": "local_timezone",
    "DISPLAY_LOCALE": "display_locale",
    "MAX_CLOCKS": "max_clocks",
    "TICK_INTERVAL_SECONDS": "tick_interval_seconds",
    "LOG_LEVEL": "log_level",
}


def _load_settings() -> Settings:
    data: dict[str, object] = {}
    for env_name, field_name in _ENV_MAPPING.items():
        if env_name not in os.environ:
            continue
        data[field_name] = os.environ[env_name]
    return Settings(**data)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = _load_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings
