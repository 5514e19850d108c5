"""Validation of bot server options."""

from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from botserver.config import ENV_VARS
from botserver.errors import (
    CredentialNotFoundError,
    MalformedCredentialError,
    MissingOptionError,
)
from botserver.models import BotServerOptions


def _require(options: BotServerOptions, field: str) -> None:
    if not getattr(options, field):
        raise MissingOptionError(field, ENV_VARS[field])


def _read_credential(path: str, field: str) -> bytes:
    credential = Path(path)
    if not credential.is_file():
        raise CredentialNotFoundError(
            f"options.{field} file not found: {path}"
        )
    return credential.read_bytes()


def check_private_key(path: str) -> None:
    """Ensure ``path`` holds an unencrypted PEM private key."""
    data = _read_credential(path, "key")
    try:
        serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError) as exc:
        raise MalformedCredentialError(
            f"options.key is not a valid PEM private key: {path}: {exc}"
        ) from exc


def check_certificate(path: str) -> None:
    """Ensure ``path`` holds a PEM X.509 certificate."""
    data = _read_credential(path, "cert")
    try:
        x509.load_pem_x509_certificate(data)
    except ValueError as exc:
        raise MalformedCredentialError(
            f"options.cert is not a valid PEM certificate: {path}: {exc}"
        ) from exc


def validate_options(options: BotServerOptions) -> BotServerOptions:
    """
    Validate options, failing on the first problem found.

    Checks run in order: port, channel_secret, channel_access_token,
    key, cert.

    Raises:
        MissingOptionError: a required option is empty or absent
        CredentialNotFoundError: key or cert path does not exist
        MalformedCredentialError: key or cert file cannot be parsed
    """
    _require(options, "port")
    _require(options, "channel_secret")
    _require(options, "channel_access_token")

    _require(options, "key")
    check_private_key(options.key)

    _require(options, "cert")
    check_certificate(options.cert)

    return options
