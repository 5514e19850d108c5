"""Tests for option resolution and env file generation."""

import os

import pytest
from dotenv import dotenv_values

from botserver import config as config_module
from botserver.config import DEFAULT_PORT, generate_env_file, get_env_options
from botserver.errors import InvalidOptionError
from botserver.models import BotServerOptions

FULL_ENV = (
    "CHANNEL_ACCESS_TOKEN=test_channelAccessToken\n"
    "CHANNEL_SECRET=test_channelSecret\n"
    "PORT=1234\n"
    "SSL_KEY=test_keyFile\n"
    "SSL_CERT=test_certFile\n"
)


def write_env(tmp_path, content: str):
    path = tmp_path / ".test.env"
    path.write_text(content)
    return path


def test_all_options_from_file(tmp_path):
    """Every variable in the file maps onto its option."""
    options = get_env_options(write_env(tmp_path, FULL_ENV), environ={})

    assert options.channel_access_token == "test_channelAccessToken"
    assert options.channel_secret == "test_channelSecret"
    assert options.port == 1234
    assert options.key == "test_keyFile"
    assert options.cert == "test_certFile"


@pytest.mark.parametrize(
    "env_var,field",
    [
        ("CHANNEL_ACCESS_TOKEN", "channel_access_token"),
        ("CHANNEL_SECRET", "channel_secret"),
        ("SSL_KEY", "key"),
        ("SSL_CERT", "cert"),
    ],
)
def test_missing_string_option_is_empty(tmp_path, env_var, field):
    """Missing string variables resolve to an empty string."""
    content = "".join(
        line + "\n"
        for line in FULL_ENV.splitlines()
        if not line.startswith(env_var + "=")
    )

    options = get_env_options(write_env(tmp_path, content), environ={})

    assert getattr(options, field) == ""


def test_missing_port_defaults_to_443(tmp_path):
    """Missing PORT resolves to 443."""
    content = FULL_ENV.replace("PORT=1234\n", "")

    options = get_env_options(write_env(tmp_path, content), environ={})

    assert options.port == DEFAULT_PORT == 443


def test_empty_port_defaults_to_443(tmp_path):
    """An empty PORT is treated as missing."""
    content = FULL_ENV.replace("PORT=1234", "PORT=")

    options = get_env_options(write_env(tmp_path, content), environ={})

    assert options.port == 443


def test_invalid_port_raises(tmp_path):
    """A non-numeric PORT cannot be resolved."""
    content = FULL_ENV.replace("PORT=1234", "PORT=https")

    with pytest.raises(InvalidOptionError, match="PORT"):
        get_env_options(write_env(tmp_path, content), environ={})


def test_environment_wins_over_file(tmp_path):
    """Variables already in the environment are not overridden."""
    options = get_env_options(
        write_env(tmp_path, FULL_ENV),
        environ={"CHANNEL_SECRET": "from_environment", "PORT": "8443"},
    )

    assert options.channel_secret == "from_environment"
    assert options.port == 8443
    assert options.channel_access_token == "test_channelAccessToken"


def test_environment_only():
    """Without an env file the injected environment is used alone."""
    options = get_env_options(
        path="",
        environ={"CHANNEL_ACCESS_TOKEN": "token", "CHANNEL_SECRET": "secret"},
    )

    assert options.channel_access_token == "token"
    assert options.channel_secret == "secret"
    assert options.port == 443
    assert options.key == ""
    assert options.cert == ""


def test_no_path_uses_ambient_env_file(tmp_path, monkeypatch):
    """Without a path the .env of the working directory is consulted."""
    (tmp_path / ".env").write_text(FULL_ENV)
    monkeypatch.chdir(tmp_path)

    options = get_env_options(environ={})

    assert options.channel_secret == "test_channelSecret"
    assert options.port == 1234


def test_no_path_looks_up_env_file_once(monkeypatch):
    """Without a path the env file is located from the working directory."""
    calls = []

    def fake_find_dotenv(**kwargs):
        calls.append(kwargs)
        return ""

    monkeypatch.setattr(config_module, "find_dotenv", fake_find_dotenv)

    get_env_options(environ={})

    assert calls == [{"usecwd": True}]


def test_resolution_does_not_touch_process_environment(tmp_path):
    """Resolving from a file leaves os.environ unchanged."""
    before = dict(os.environ)

    get_env_options(write_env(tmp_path, FULL_ENV), environ={})

    assert dict(os.environ) == before


def test_generate_env_file_without_options(tmp_path):
    """A template is written with every variable empty."""
    path = tmp_path / ".test-gen-empty.env"

    generate_env_file(path)
    values = dotenv_values(path)

    for name in ("CHANNEL_SECRET", "CHANNEL_ACCESS_TOKEN", "PORT", "SSL_KEY", "SSL_CERT"):
        assert values[name] == ""


def test_generate_env_file_with_empty_options(tmp_path):
    """Empty options produce the same template."""
    path = tmp_path / ".test-gen-empty.env"

    generate_env_file(path, BotServerOptions())
    values = dotenv_values(path)

    assert values["PORT"] == ""
    assert values["SSL_CERT"] == ""


def test_generate_env_file_with_options(tmp_path, full_options):
    """Written variables match the options and resolve back to them."""
    path = tmp_path / ".test-gen.env"

    generate_env_file(path, full_options)
    values = dotenv_values(path)

    assert values["CHANNEL_SECRET"] == full_options.channel_secret
    assert values["CHANNEL_ACCESS_TOKEN"] == full_options.channel_access_token
    assert values["PORT"] == str(full_options.port)
    assert values["SSL_KEY"] == full_options.key
    assert values["SSL_CERT"] == full_options.cert
    assert get_env_options(path, environ={}) == full_options
