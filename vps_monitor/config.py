"""Centralized configuration using Pydantic BaseSettings"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/141.0.0.0 Safari/537.36"
)


class AppConfig(BaseSettings):
    """Application configuration with environment variable support"""

    # Database
    db_path: str = Field(default="./data/monitor.db", description="SQLite database file path")

    # Remote account page
    target_url: str = Field(
        default="https://hax.co.id/vps-info", description="VPS info page scraped for each account"
    )
    target_referer: str = Field(
        default="https://hax.co.id/", description="Referer sent with the scrape request"
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT, description="Browser user agent sent with the scrape request"
    )
    request_timeout: float = Field(
        default=5.0, gt=0, description="HTTP timeout in seconds (httpx default)"
    )

    # Timezones
    source_timezone: str = Field(
        default="Asia/Jakarta", description="Zone the remote page renders its dates in"
    )
    display_timezone: str = Field(
        default="Asia/Kuala_Lumpur", description="Zone used when presenting instants"
    )

    # Background refresh
    refresh_enabled: bool = Field(default=True, description="Enable the periodic refresh job")
    refresh_cron: str = Field(
        default="0 * * * *", description="Crontab expression for the refresh job"
    )

    # HTTP API
    api_host: str = Field(default="0.0.0.0", description="API server bind address")
    api_port: int = Field(default=4000, ge=1, le=65535, description="API server port")
    api_cors_enabled: bool = Field(default=True, description="Enable CORS for the API server")

    # OpenTelemetry
    otel_logging_enabled: bool = Field(
        default=False, description="Enable OpenTelemetry logging of refresh events"
    )
    otel_tracing_enabled: bool = Field(
        default=False, description="Enable OpenTelemetry tracing for HTTP requests"
    )
    otel_endpoint: str = Field(
        default="http://localhost:4318",
        description="OpenTelemetry collector endpoint (HTTP/protobuf)",
    )
    otel_service_name: str = Field(default="vps-monitor", description="Service name for OpenTelemetry")
    otel_service_version: str = Field(
        default="1.0.0", description="Service version for OpenTelemetry"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("source_timezone", "display_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {value}") from e
        return value

    @field_validator("refresh_cron")
    @classmethod
    def _validate_cron(cls, value: str) -> str:
        if len(value.split()) != 5:
            raise ValueError(f"refresh_cron must have 5 fields, got: {value!r}")
        return value


# Global config instance
config = AppConfig()
