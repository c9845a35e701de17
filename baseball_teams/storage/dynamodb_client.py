# baseball_teams/storage/dynamodb_client.py
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from loguru import logger

from baseball_teams.config.settings import AppSettings, settings as default_settings


def build_client_config(settings: AppSettings) -> Config:
    """Transport policy: timeouts and retries live on the client, not the repository."""
    return Config(
        region_name=settings.aws_region,
        connect_timeout=settings.connect_timeout,
        read_timeout=settings.read_timeout,
        retries={
            "total_max_attempts": settings.max_attempts,
            "mode": settings.retry_mode,
        },
    )


def create_dynamodb_client(settings: Optional[AppSettings] = None):
    """Creates a low-level DynamoDB client from settings.

    The client is thread-safe and meant to be created once and injected into
    every repository that needs it.
    """
    settings = settings or default_settings

    session = boto3.session.Session(
        profile_name=settings.aws_profile, region_name=settings.aws_region
    )
    kwargs: Dict[str, Any] = {"config": build_client_config(settings)}
    if settings.dynamodb_endpoint_url:
        kwargs["endpoint_url"] = settings.dynamodb_endpoint_url
    if settings.aws_access_key_id and settings.aws_secret_access_key:
        kwargs["aws_access_key_id"] = settings.aws_access_key_id
        kwargs["aws_secret_access_key"] = settings.aws_secret_access_key

    logger.debug(
        f"Creating DynamoDB client for region {settings.aws_region}"
        + (
            f" at {settings.dynamodb_endpoint_url}"
            if settings.dynamodb_endpoint_url
            else ""
        )
    )
    return session.client("dynamodb", **kwargs)
