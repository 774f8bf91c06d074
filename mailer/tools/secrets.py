"""
Secrets Tools

Resolves the SendGrid API key, either directly from settings or from
AWS Secrets Manager. Resolution happens once per invocation and the
result is passed explicitly to the email sender.
"""

import base64
import binascii
import json

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from mailer.config import Settings, get_settings
from mailer.exceptions import CredentialUnavailableError

log = structlog.get_logger()


def _get_client(settings: Settings):
    """Get Secrets Manager client."""
    return boto3.client("secretsmanager", **settings.secretsmanager_config)


def _parse_secret_string(secret_string: str, secret_name: str, key_field: str) -> str:
    try:
        secret = json.loads(secret_string)
    except json.JSONDecodeError as e:
        raise CredentialUnavailableError(
            secret_name=secret_name,
            error_message=f"SecretString is not valid JSON: {e.msg}",
        ) from e

    api_key = secret.get(key_field) if isinstance(secret, dict) else None
    if not isinstance(api_key, str) or not api_key:
        raise CredentialUnavailableError(
            secret_name=secret_name,
            error_message=f"SecretString has no '{key_field}' field",
        )
    return api_key


def _parse_secret_binary(secret_binary: bytes, secret_name: str) -> str:
    try:
        api_key = base64.b64decode(secret_binary, validate=True).decode("ascii").strip()
    except (binascii.Error, UnicodeDecodeError) as e:
        raise CredentialUnavailableError(
            secret_name=secret_name,
            error_message=f"SecretBinary could not be decoded: {e}",
        ) from e

    if not api_key:
        raise CredentialUnavailableError(
            secret_name=secret_name,
            error_message="SecretBinary is empty",
        )
    return api_key


def fetch_sendgrid_api_key(
    secret_name: str,
    *,
    key_field: str = "SENDGRID_API_KEY",
    settings: Settings | None = None,
) -> str:
    """
    Fetch the SendGrid API key from Secrets Manager.

    A SecretString is parsed as JSON and the key read from key_field.
    A SecretBinary is base64-decoded and read as an ASCII key.

    Args:
        secret_name: Secret identifier (name or ARN)
        key_field: JSON field holding the key inside a SecretString
        settings: Override settings (default: from environment)

    Returns:
        The API key

    Raises:
        CredentialUnavailableError: If the request fails, the secret is
            missing, or it carries no usable payload
    """
    settings = settings or get_settings()

    log.info("fetching_secret", secret_name=secret_name)

    try:
        client = _get_client(settings)
        response = client.get_secret_value(SecretId=secret_name)
    except BotoCoreError as e:
        # Unreachable endpoint, missing credentials or region
        log.error(
            "secret_fetch_failed",
            secret_name=secret_name,
            error_code=type(e).__name__,
            error_message=str(e),
        )

        raise CredentialUnavailableError(
            secret_name=secret_name,
            error_message=str(e),
        ) from e
    except ClientError as e:
        error_code = e.response["Error"]["Code"]
        error_message = e.response["Error"]["Message"]

        log.error(
            "secret_fetch_failed",
            secret_name=secret_name,
            error_code=error_code,
            error_message=error_message,
        )

        raise CredentialUnavailableError(
            secret_name=secret_name,
            error_message=f"{error_code}: {error_message}",
        ) from e

    if response.get("SecretString"):
        return _parse_secret_string(response["SecretString"], secret_name, key_field)
    if response.get("SecretBinary"):
        return _parse_secret_binary(response["SecretBinary"], secret_name)

    raise CredentialUnavailableError(
        secret_name=secret_name,
        error_message="Secret has neither SecretString nor SecretBinary",
    )


def resolve_sendgrid_api_key(settings: Settings | None = None) -> str:
    """
    Resolve the SendGrid API key for this invocation.

    Uses the directly configured key when present, otherwise queries
    Secrets Manager for settings.secret_name.

    Raises:
        CredentialUnavailableError: If no key can be resolved
    """
    settings = settings or get_settings()

    if settings.sendgrid_api_key:
        log.debug("using_configured_api_key")
        return settings.sendgrid_api_key

    api_key = fetch_sendgrid_api_key(
        settings.secret_name,
        key_field=settings.secret_key_field,
        settings=settings,
    )
    log.info("secret_resolved", secret_name=settings.secret_name)
    return api_key
