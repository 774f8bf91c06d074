"""
Pytest Configuration and Shared Fixtures

Provides moto AWS mocking, a mocked SendGrid endpoint, sample events,
and test settings.
"""

import json
import os
from typing import Any

import boto3
import pytest
from moto import mock_aws

# Set test environment before importing application modules
for _var in ("BASE_URL", "SENDGRID_API_KEY", "AWS_LAMBDA_FUNCTION_NAME"):
    os.environ.pop(_var, None)
os.environ["VERIFICATION_LOG_FILE_PATH"] = ""
os.environ["VERIFICATION_AWS_REGION"] = "us-east-1"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"

from mailer.config import Settings  # noqa: E402
from tests.mocks.mock_sendgrid import MockSendGrid  # noqa: E402
from tests.utils.event_generator import MockEventGenerator  # noqa: E402


# --- Settings Fixtures ---


@pytest.fixture
def base_url() -> str:
    """Host used for links and the sender address."""
    return "example.com"


@pytest.fixture
def api_key() -> str:
    """Sample SendGrid API key."""
    return "SG.test-key"


@pytest.fixture
def settings(base_url: str, api_key: str) -> Settings:
    """Settings with a directly configured API key and no retry."""
    return Settings(
        _env_file=None,
        base_url=base_url,
        sendgrid_api_key=api_key,
        log_file_path="",
        send_retry_multiplier_seconds=0,
        send_retry_max_wait_seconds=0,
    )


@pytest.fixture
def secret_settings(base_url: str) -> Settings:
    """Settings that resolve the API key from Secrets Manager."""
    return Settings(
        _env_file=None,
        base_url=base_url,
        secret_name="test/sendgrid",
        aws_region="us-east-1",
        log_file_path="",
    )


# --- AWS Mocking Fixtures ---


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    return {
        "aws_access_key_id": "testing",
        "aws_secret_access_key": "testing",
        "region_name": "us-east-1",
    }


@pytest.fixture
def mock_secretsmanager(aws_credentials):
    """Mocked Secrets Manager with no secrets created."""
    with mock_aws():
        yield boto3.client("secretsmanager", **aws_credentials)


# --- SendGrid Fixtures ---


@pytest.fixture
def sendgrid() -> MockSendGrid:
    """Mocked SendGrid endpoint (202 unless told otherwise)."""
    return MockSendGrid()


# --- Event Fixtures ---


@pytest.fixture
def event_generator() -> MockEventGenerator:
    """Seeded event generator."""
    return MockEventGenerator(seed=6225)


@pytest.fixture
def verification_payload() -> dict[str, Any]:
    """Sample decoded notification payload."""
    return {"email": "a@b.com", "verificationToken": "tok123"}


@pytest.fixture
def sns_event(
    event_generator: MockEventGenerator,
    verification_payload: dict[str, Any],
) -> dict[str, Any]:
    """Single-record SNS event."""
    return {"Records": [event_generator.sns_record(verification_payload)]}


@pytest.fixture
def malformed_record(event_generator: MockEventGenerator) -> dict[str, Any]:
    """SNS record whose message is not JSON."""
    return event_generator.sns_record("{not json")


@pytest.fixture
def secret_string(api_key: str) -> str:
    """SecretString as stored in Secrets Manager."""
    return json.dumps({"SENDGRID_API_KEY": api_key})
