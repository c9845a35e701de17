"""
Pytest configuration and shared fixtures.

This module provides:
- Fake AWS credentials so no test can reach a real account
- A moto-backed DynamoDB client with the teams table created
- A repository wired to that client
"""

import os

import pytest

# Set test environment variables BEFORE any imports
# Settings are loaded at import time of baseball_teams.config.settings
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["AWS_SECURITY_TOKEN"] = "testing"
os.environ["AWS_SESSION_TOKEN"] = "testing"
os.environ["AWS_DEFAULT_REGION"] = "ap-northeast-1"
os.environ.pop("AWS_PROFILE", None)
os.environ.pop("AWS_REGION", None)
os.environ.pop("DYNAMODB_ENDPOINT_URL", None)

import boto3  # noqa: E402
from moto import mock_aws  # noqa: E402

from baseball_teams.models.team import BaseballTeam  # noqa: E402
from baseball_teams.storage.team_repository import BaseballTeamRepository  # noqa: E402

TABLE_NAME = "BaseballTeams"
REGION = "ap-northeast-1"


@pytest.fixture
def dynamodb_client():
    """
    Provide a DynamoDB client against an in-process moto backend.

    The teams table is created before the test and discarded with the mock.
    """
    with mock_aws():
        client = boto3.client("dynamodb", region_name=REGION)
        client.create_table(
            TableName=TABLE_NAME,
            KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
            AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
            BillingMode="PAY_PER_REQUEST",
        )
        yield client


@pytest.fixture
def repository(dynamodb_client):
    return BaseballTeamRepository(dynamodb_client, TABLE_NAME)


@pytest.fixture
def team():
    return BaseballTeam(
        id="test001",
        name="Team 1",
        batting_order=[1, 2, 3],
        reserve={4, 5, 6},
    )
