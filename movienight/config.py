"""Runtime settings, read from MOVIENIGHT_* environment variables or .env."""

from datetime import date
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from movienight.models import Phase


MAX_SUBMISSIONS = 2

# Night 1 is the week starting at midnight on this date (a Sunday).
DEFAULT_ANCHOR_DATE = date(2025, 1, 5)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MOVIENIGHT_",
        env_file=".env",
        extra="ignore",
    )

    store_url: str = "memory://"
    supabase_key: str | None = None

    max_submissions: int = Field(default=MAX_SUBMISSIONS, ge=1)
    anchor_date: date = DEFAULT_ANCHOR_DATE
    timezone: str = "UTC"
    tally_method: str = "irv"

    # Admin override; sticky until unset.
    phase_override: Phase | None = None

    tmdb_api_key: str | None = None
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    http_timeout: float = Field(default=30.0, gt=0)

    log_level: str = "INFO"

    @field_validator("timezone")
    @classmethod
    def _check_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone: {value}") from e
        return value

    @field_validator("tally_method")
    @classmethod
    def _check_tally_method(cls, value: str) -> str:
        value = value.lower()
        if value not in ("irv", "legacy"):
            raise ValueError("tally_method must be 'irv' or 'legacy'")
        return value

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def get_settings(**overrides) -> Settings:
    """Load settings from the environment, with explicit overrides on top."""
    return Settings(**overrides)
