"""Configuration management for bucket-lifecycle.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the BUCKET_LIFECYCLE_ prefix (e.g., BUCKET_LIFECYCLE_AWS_REGION).
    """

    model_config = SettingsConfigDict(
        env_prefix="BUCKET_LIFECYCLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # AWS Configuration
    aws_region: str | None = Field(
        default=None,
        description="Region used when bucket region resolution is disabled",
    )
    aws_profile: str | None = Field(
        default=None,
        description="Named AWS profile used to build the boto3 session",
    )
    endpoint_url: str | None = Field(
        default=None,
        description="Custom S3 endpoint URL, for S3-compatible object stores",
    )
    resolve_bucket_region: bool = Field(
        default=True,
        description=(
            "Look up each bucket's region with GetBucketLocation and talk to the "
            "matching regional endpoint."
        ),
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
