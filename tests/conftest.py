"""Pytest configuration and shared fixtures."""

import pytest

from botserver.certificates import create_certificate, default_credential_paths
from botserver.models import BotServerOptions


@pytest.fixture(scope="session")
def ssl_dir(tmp_path_factory):
    """Directory holding one valid key and certificate for the session."""
    directory = tmp_path_factory.mktemp("ssl")
    key_path, cert_path = default_credential_paths(directory)
    bundle = create_certificate(days=1)

    with open(key_path, "w", encoding="ascii") as f:
        f.write(bundle.private_key)
    with open(cert_path, "w", encoding="ascii") as f:
        f.write(bundle.certificate)

    return directory


@pytest.fixture
def full_options(ssl_dir) -> BotServerOptions:
    """Complete, valid bot server options."""
    key_path, cert_path = default_credential_paths(ssl_dir)
    return BotServerOptions(
        channel_access_token="testToken",
        channel_secret="testSecret",
        port=1234,
        key=key_path,
        cert=cert_path,
    )