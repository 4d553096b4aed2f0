"""
Configuration management for the Punch time tracking service
"""
from datetime import timedelta
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from punch.constants import (
    DEFAULT_OVERHEAD_MINUTES,
    DEFAULT_RECENT_EVENTS,
    DEFAULT_REPORT_DAYS,
    DEFAULT_REPORT_WEEKS,
)
from punch.schemas.report import ReportConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    DATABASE_URL: str = Field(default="sqlite:///./punch.db", description="SQLAlchemy database URL of the event store")

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # Version (can be git SHA or semver)
    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    # Reporting. Events are stored in UTC; this zone decides which calendar day/week they fall on.
    TIME_ZONE: str = Field(default="UTC", description="IANA time zone used when the project has none")
    DEFAULT_OVERHEAD_MINUTES: int = Field(
        default=DEFAULT_OVERHEAD_MINUTES,
        description="Ramp-up overhead deducted once per work session, for newly created projects",
    )
    REPORT_DAYS: int = Field(default=DEFAULT_REPORT_DAYS, description="Number of days shown in the summary report")
    REPORT_WEEKS: int = Field(default=DEFAULT_REPORT_WEEKS, description="Number of weeks shown in the summary report")
    WEEK_START: int = Field(default=0, description="First day of the week: 0=Monday .. 6=Sunday")
    RECENT_EVENTS: int = Field(default=DEFAULT_RECENT_EVENTS, description="Number of recent events in the summary report")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    @field_validator("TIME_ZONE")
    @classmethod
    def validate_time_zone(cls, v: str) -> str:
        """Validate TIME_ZONE is a known IANA zone"""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"TIME_ZONE '{v}' is not a known IANA time zone")
        return v

    @field_validator("DEFAULT_OVERHEAD_MINUTES")
    @classmethod
    def validate_overhead(cls, v: int) -> int:
        if v < 0:
            raise ValueError("DEFAULT_OVERHEAD_MINUTES must not be negative")
        return v

    @field_validator("REPORT_DAYS", "REPORT_WEEKS", "RECENT_EVENTS")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("report window sizes must be greater than zero")
        return v

    @field_validator("WEEK_START")
    @classmethod
    def validate_week_start(cls, v: int) -> int:
        if not 0 <= v <= 6:
            raise ValueError("WEEK_START must be between 0 (Monday) and 6 (Sunday)")
        return v

    def report_config(
        self,
        overhead_minutes: Optional[int] = None,
        time_zone: Optional[str] = None,
    ) -> ReportConfig:
        """
        Build the report engine configuration

        Per-project values take precedence over the service-wide defaults.

        Args:
            overhead_minutes: Project overhead in minutes (None = DEFAULT_OVERHEAD_MINUTES)
            time_zone: Project IANA time zone (None = TIME_ZONE)

        Returns:
            ReportConfig for the report engine
        """
        if overhead_minutes is None:
            overhead_minutes = self.DEFAULT_OVERHEAD_MINUTES
        return ReportConfig(
            overhead=timedelta(minutes=overhead_minutes),
            time_zone=time_zone or self.TIME_ZONE,
            days_window=self.REPORT_DAYS,
            weeks_window=self.REPORT_WEEKS,
            week_start=self.WEEK_START,
        )


# Create settings instance
settings = Settings()
