"""
Unit tests for credential resolution.

Tests cover:
- fetch_sendgrid_api_key: SecretString, SecretBinary, missing and unusable secrets
- resolve_sendgrid_api_key: direct key vs Secrets Manager
"""

import base64
import json
from unittest.mock import MagicMock, patch

import pytest
import boto3
from botocore.config import Config
from botocore.exceptions import (
    ClientError,
    EndpointConnectionError,
    NoCredentialsError,
    NoRegionError,
)

from mailer.exceptions import CredentialUnavailableError
from mailer.tools.secrets import fetch_sendgrid_api_key, resolve_sendgrid_api_key


class TestFetchSendgridApiKey:
    """Tests for fetch_sendgrid_api_key against mocked Secrets Manager."""

    def test_reads_key_from_secret_string(
        self, mock_secretsmanager, secret_settings, secret_string, api_key
    ):
        """Test JSON SecretString yields the SENDGRID_API_KEY field."""
        mock_secretsmanager.create_secret(Name="test/sendgrid", SecretString=secret_string)

        result = fetch_sendgrid_api_key("test/sendgrid", settings=secret_settings)

        assert result == api_key

    def test_reads_custom_key_field(self, mock_secretsmanager, secret_settings):
        """Test a non-default JSON field name."""
        mock_secretsmanager.create_secret(
            Name="test/sendgrid",
            SecretString=json.dumps({"api_key": "SG.custom"}),
        )

        result = fetch_sendgrid_api_key(
            "test/sendgrid", key_field="api_key", settings=secret_settings
        )

        assert result == "SG.custom"

    def test_reads_key_from_secret_binary(self, mock_secretsmanager, secret_settings):
        """Test base64 SecretBinary is decoded as ASCII."""
        mock_secretsmanager.create_secret(
            Name="test/sendgrid",
            SecretBinary=base64.b64encode(b"SG.binary-key"),
        )

        result = fetch_sendgrid_api_key("test/sendgrid", settings=secret_settings)

        assert result == "SG.binary-key"

    def test_missing_secret_raises(self, mock_secretsmanager, secret_settings):
        """Test a secret that does not exist."""
        with pytest.raises(CredentialUnavailableError) as exc_info:
            fetch_sendgrid_api_key("test/sendgrid", settings=secret_settings)

        assert exc_info.value.secret_name == "test/sendgrid"
        assert "ResourceNotFoundException" in str(exc_info.value)

    def test_secret_string_not_json_raises(self, mock_secretsmanager, secret_settings):
        """Test a SecretString that is not JSON."""
        mock_secretsmanager.create_secret(Name="test/sendgrid", SecretString="SG.plain")

        with pytest.raises(CredentialUnavailableError, match="not valid JSON"):
            fetch_sendgrid_api_key("test/sendgrid", settings=secret_settings)

    def test_secret_string_without_field_raises(self, mock_secretsmanager, secret_settings):
        """Test a JSON SecretString missing the key field."""
        mock_secretsmanager.create_secret(
            Name="test/sendgrid",
            SecretString=json.dumps({"OTHER": "value"}),
        )

        with pytest.raises(CredentialUnavailableError, match="SENDGRID_API_KEY"):
            fetch_sendgrid_api_key("test/sendgrid", settings=secret_settings)

    def test_secret_binary_not_base64_raises(self, mock_secretsmanager, secret_settings):
        """Test a SecretBinary that is not valid base64."""
        mock_secretsmanager.create_secret(Name="test/sendgrid", SecretBinary=b"%%%")

        with pytest.raises(CredentialUnavailableError, match="SecretBinary"):
            fetch_sendgrid_api_key("test/sendgrid", settings=secret_settings)


class TestFetchSendgridApiKeyClient:
    """Tests for fetch_sendgrid_api_key against a stubbed client."""

    @patch("mailer.tools.secrets._get_client")
    def test_empty_response_raises(self, mock_get_client, secret_settings):
        """Test a secret with neither string nor binary payload."""
        mock_client = MagicMock()
        mock_client.get_secret_value.return_value = {"Name": "test/sendgrid"}
        mock_get_client.return_value = mock_client

        with pytest.raises(CredentialUnavailableError, match="neither"):
            fetch_sendgrid_api_key("test/sendgrid", settings=secret_settings)

    @patch("mailer.tools.secrets._get_client")
    def test_access_denied_raises(self, mock_get_client, secret_settings):
        """Test a ClientError from the secret store."""
        mock_client = MagicMock()
        mock_client.get_secret_value.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "Not authorized"}},
            "GetSecretValue",
        )
        mock_get_client.return_value = mock_client

        with pytest.raises(CredentialUnavailableError) as exc_info:
            fetch_sendgrid_api_key("test/sendgrid", settings=secret_settings)

        assert "AccessDeniedException" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, ClientError)

    @pytest.mark.parametrize(
        "error",
        [
            EndpointConnectionError(endpoint_url="http://127.0.0.1:9/"),
            NoCredentialsError(),
        ],
    )
    @patch("mailer.tools.secrets._get_client")
    def test_unreachable_store_raises(self, mock_get_client, error, secret_settings):
        """Test connection and credential errors become CredentialUnavailableError."""
        mock_client = MagicMock()
        mock_client.get_secret_value.side_effect = error
        mock_get_client.return_value = mock_client

        with pytest.raises(CredentialUnavailableError) as exc_info:
            fetch_sendgrid_api_key("test/sendgrid", settings=secret_settings)

        assert exc_info.value.__cause__ is error

    @patch("mailer.tools.secrets._get_client")
    def test_client_construction_failure_raises(self, mock_get_client, secret_settings):
        """Test a client that cannot be built (no region) is also covered."""
        mock_get_client.side_effect = NoRegionError()

        with pytest.raises(CredentialUnavailableError, match="region"):
            fetch_sendgrid_api_key("test/sendgrid", settings=secret_settings)

    def test_unreachable_endpoint_raises(self, secret_settings):
        """Test a real client pointed at a closed port."""
        unreachable = secret_settings.model_copy(
            update={"secretsmanager_endpoint_url": "http://127.0.0.1:9"}
        )
        client = boto3.client(
            "secretsmanager",
            config=Config(retries={"max_attempts": 1}, connect_timeout=1),
            **unreachable.secretsmanager_config,
        )

        with patch("mailer.tools.secrets._get_client", return_value=client):
            with pytest.raises(CredentialUnavailableError, match="127.0.0.1:9"):
                fetch_sendgrid_api_key("test/sendgrid", settings=unreachable)


class TestResolveSendgridApiKey:
    """Tests for resolve_sendgrid_api_key."""

    @patch("mailer.tools.secrets._get_client")
    def test_direct_key_skips_secret_store(self, mock_get_client, settings, api_key):
        """Test a configured key is returned without querying AWS."""
        result = resolve_sendgrid_api_key(settings)

        assert result == api_key
        mock_get_client.assert_not_called()

    def test_falls_back_to_secret_store(
        self, mock_secretsmanager, secret_settings, secret_string, api_key
    ):
        """Test the secret store is queried when no key is configured."""
        mock_secretsmanager.create_secret(Name="test/sendgrid", SecretString=secret_string)

        assert resolve_sendgrid_api_key(secret_settings) == api_key

    def test_secret_store_failure_propagates(self, mock_secretsmanager, secret_settings):
        """Test resolution failure surfaces as CredentialUnavailableError."""
        with pytest.raises(CredentialUnavailableError):
            resolve_sendgrid_api_key(secret_settings)
