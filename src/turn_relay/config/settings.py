"""
Module: settings.py
Description: Application configuration using pydantic-settings.

Configures all application settings from environment variables with
validation and defaults. Supports .env files for local development.

Notion credentials are optional at load time: a missing API key or
database ID is reported per delivery attempt rather than failing startup.
"""

import re
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="Turn Relay", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")

    # AWS settings
    aws_region: str = Field(default="us-east-1", description="AWS region")
    stage: str = Field(default="dev", description="Deployment stage")

    # Notion settings
    notion_api_key: Optional[str] = Field(
        default=None,
        description="Notion integration token"
    )
    notion_database_id: Optional[str] = Field(
        default=None,
        description="Notion database receiving turn pages"
    )
    notion_api_url: str = Field(
        default="https://api.notion.com/v1/pages",
        description="Notion create-page endpoint"
    )
    notion_version: str = Field(
        default="2022-06-28",
        description="Value of the Notion-Version header"
    )
    delivery_timeout: int = Field(
        default=10,
        ge=1,
        le=30,
        description="HTTP timeout in seconds for delivery attempts"
    )

    # Retry queue settings
    queue_table_name: Optional[str] = Field(
        default=None,
        description="Name of the DynamoDB retry queue table"
    )
    queue_key_prefix: str = Field(
        default="queue:",
        min_length=1,
        description="Key prefix of queued items"
    )
    queue_ttl_seconds: int = Field(
        default=86400,
        ge=60,
        description="Lifetime of a queued item since its last write"
    )
    rate_limit_max_retries: int = Field(
        default=5,
        ge=1,
        description="Retry ceiling for items that keep getting rate limited"
    )
    failure_max_retries: int = Field(
        default=3,
        ge=1,
        description="Retry ceiling for items that keep failing"
    )

    # Metrics settings
    metrics_enabled: bool = Field(
        default=False,
        description="Publish CloudWatch custom metrics"
    )
    metrics_namespace: str = Field(
        default="TurnRelay",
        description="CloudWatch metrics namespace"
    )

    @field_validator('notion_api_key', 'notion_database_id', 'queue_table_name', mode='before')
    @classmethod
    def empty_to_none(cls, v):
        """Treat blank environment values as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('queue_table_name')
    @classmethod
    def validate_table_name(cls, v: Optional[str]) -> Optional[str]:
        """Validate DynamoDB table name."""
        if v is None:
            return v

        # Allow alphanumeric, hyphens, underscores, dots
        if not re.match(r'^[a-zA-Z0-9_.-]{3,255}$', v):
            raise ValueError(
                "Table name must be 3-255 letters, numbers, dots, hyphens, or underscores"
            )

        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @property
    def notion_configured(self) -> bool:
        """Whether both Notion credentials are present."""
        return bool(self.notion_api_key and self.notion_database_id)


# Global settings instance
settings = Settings()
