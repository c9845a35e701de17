import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_RETRY_MODES = ["legacy", "standard", "adaptive"]


class AppSettings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    # DynamoDB Configuration
    dynamodb_table_name: str = Field(
        "BaseballTeams", description="Name of the table holding team items."
    )
    dynamodb_endpoint_url: Optional[str] = Field(
        None,
        description="Override endpoint, e.g. http://localhost:4566 for LocalStack.",
    )
    consistent_read: bool = Field(
        True, description="Use strongly consistent reads for point lookups."
    )

    # AWS Credentials
    aws_region: str = Field("ap-northeast-1", description="AWS region name.")
    aws_profile: Optional[str] = Field(
        None, description="Shared config profile to load credentials from."
    )
    aws_access_key_id: Optional[str] = Field(
        None, description="Static access key id (leave unset to use the default chain)."
    )
    aws_secret_access_key: Optional[str] = Field(
        None, description="Static secret access key (use with caution!)."
    )

    # Transport Settings (retries are the client's job, not the repository's)
    connect_timeout: float = Field(5.0, gt=0, description="Socket connect timeout in seconds.")
    read_timeout: float = Field(10.0, gt=0, description="Socket read timeout in seconds.")
    max_attempts: int = Field(
        3, ge=1, description="Total attempts per request, including the first one."
    )
    retry_mode: str = Field("standard", description="botocore retry mode.")
    operation_timeout: Optional[float] = Field(
        None,
        gt=0,
        description="Deadline in seconds for a whole repository operation.",
    )

    # Logging Configuration
    log_level: str = Field(
        "INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


def load_settings() -> AppSettings:
    """Loads and validates application settings."""
    try:
        settings = AppSettings()
        log_level_upper = settings.log_level.upper()
        # Validate log_level even if loaded from .env
        if log_level_upper not in VALID_LOG_LEVELS:
            logging.warning(
                f"Invalid LOG_LEVEL '{settings.log_level}' found in .env or default. Using INFO."
            )
            settings.log_level = "INFO"
        else:
            settings.log_level = log_level_upper

        retry_mode = settings.retry_mode.lower()
        if retry_mode not in VALID_RETRY_MODES:
            raise ValueError(
                f"RETRY_MODE must be one of {VALID_RETRY_MODES}, got '{settings.retry_mode}'"
            )
        settings.retry_mode = retry_mode
        return settings
    except Exception as e:
        logging.exception(f"Error loading application settings: {e}")
        raise SystemExit("Failed to load application settings. Exiting.")


settings: AppSettings = load_settings()
