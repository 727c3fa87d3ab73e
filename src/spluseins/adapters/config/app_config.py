"""12-factor configuration adapter using environment variables."""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from spluseins.domain.models.retry_policy import RetryPolicy


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Sked upstream configuration
    sked_url: str = Field(
        default="https://stundenplan.ostfalia.de/",
        description="Base URL of the sked timetable system, request paths are appended to it",
    )
    sked_user: str = Field(default="", description="Basic auth user name for sked")
    sked_password: str = Field(default="", description="Basic auth password for sked")
    sked_timeout_seconds: int = Field(
        default=30, description="Timeout for a single sked request in seconds"
    )
    fetch_max_attempts: int = Field(
        default=3, description="Number of attempts per sked request before giving up"
    )
    fetch_backoff_ms: int = Field(
        default=100, description="Fixed pause between sked request attempts in milliseconds"
    )

    # Cache configuration
    # Default lives in /tmp because the rest of the filesystem is read-only on AWS Lambda
    cache_path: str = Field(
        default="/tmp/spluseins-cache",
        description="Directory of the filesystem cache for parsed lectures",
    )
    cache_disable: bool = Field(default=False, description="Disable caching of parsed lectures")
    splus_cache_seconds: int = Field(
        default=10800, description="Lifetime of cached lectures in seconds"
    )

    timezone: str = Field(
        default="Europe/Berlin",
        description="Timezone the sked pages are written in (IANA timezone name)",
    )

    @field_validator("fetch_max_attempts")
    @classmethod
    def validate_fetch_max_attempts(cls, v: int) -> int:
        """Validate at least one attempt is made."""
        if v < 1:
            raise ValueError("fetch_max_attempts must be at least 1")
        return v

    @field_validator("fetch_backoff_ms", "splus_cache_seconds")
    @classmethod
    def validate_not_negative(cls, v: int) -> int:
        """Validate durations are not negative."""
        if v < 0:
            raise ValueError("durations must not be negative")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Validate timezone is a known IANA name."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"timezone must be a valid IANA timezone name, got {v!r}") from e
        return v

    def retry_policy(self) -> RetryPolicy:
        """Build the retry policy for sked requests."""
        return RetryPolicy(
            max_attempts=self.fetch_max_attempts,
            backoff_seconds=self.fetch_backoff_ms / 1000.0,
        )

    def tzinfo(self) -> ZoneInfo:
        """Timezone object for parsed sked times."""
        return ZoneInfo(self.timezone)
