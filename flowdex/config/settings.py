"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from flowdex.config.constants import (
    FLOW_GATEWAY_TIMEOUT,
    INDEXER_POLL_INTERVAL,
    TX_STATUS_POLL_INTERVAL,
)

_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./flowdex.db"
    database_echo: bool = False

    # Flow Access REST API (emulator default port)
    flow_gateway_url: str = "http://127.0.0.1:8888"
    flow_gateway_timeout: float = Field(
        default=FLOW_GATEWAY_TIMEOUT,
        gt=0,
        description="HTTP timeout for gateway requests in seconds",
    )

    # Indexer timing
    indexer_poll_interval: float = Field(
        default=INDEXER_POLL_INTERVAL,
        gt=0,
        description="Interval between indexer ticks in seconds",
    )
    tx_status_poll_interval: float = Field(
        default=TX_STATUS_POLL_INTERVAL,
        gt=0,
        description="Interval between transaction status polls in seconds",
    )

    # Application
    environment: str = "development"
    log_level: str = "INFO"
    log_file: str | None = "logs/flowdex.log"
    health_check_port: int = Field(
        default=8081, ge=1, le=65535, description="Health check HTTP server port"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize log level and reject unknown ones."""
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {value!r}"
            )
        return level

    @field_validator("flow_gateway_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        """Gateway paths are joined with a leading slash."""
        return value.rstrip("/")


settings = Settings()
