"""Configuration management using environment variables."""

import os
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from dotenv import dotenv_values, find_dotenv

from botserver.errors import InvalidOptionError
from botserver.models import BotServerOptions

DEFAULT_PORT = 443

# Option field -> environment variable, in env file order.
ENV_VARS: Dict[str, str] = {
    "channel_access_token": "CHANNEL_ACCESS_TOKEN",
    "channel_secret": "CHANNEL_SECRET",
    "port": "PORT",
    "key": "SSL_KEY",
    "cert": "SSL_CERT",
}


class Config:
    """Process settings from environment variables."""

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    HOST: str = os.getenv("HOST", "0.0.0.0")


config = Config()


def load_environment(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Merge an env file with the given environment.

    Values already present in ``environ`` win over the file, the same way
    dotenv leaves existing process variables untouched. Without ``path``
    the nearest ``.env`` from the working directory is used, if any.
    """
    if environ is None:
        environ = os.environ
    if path is None:
        path = find_dotenv(usecwd=True)

    merged: Dict[str, str] = {}
    if path:
        for name, value in dotenv_values(path).items():
            merged[name] = value or ""
    merged.update(environ)
    return merged


def get_env_options(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> BotServerOptions:
    """Resolve bot server options from an env file and the environment."""
    env = load_environment(path, environ)

    raw_port = env.get(ENV_VARS["port"], "").strip()
    if raw_port:
        try:
            port = int(raw_port)
        except ValueError:
            raise InvalidOptionError(
                f"Invalid options.port {raw_port!r}\n"
                f"Please set {ENV_VARS['port']} to an integer."
            ) from None
    else:
        port = DEFAULT_PORT

    return BotServerOptions(
        channel_access_token=env.get(ENV_VARS["channel_access_token"], ""),
        channel_secret=env.get(ENV_VARS["channel_secret"], ""),
        port=port,
        key=env.get(ENV_VARS["key"], ""),
        cert=env.get(ENV_VARS["cert"], ""),
    )


def generate_env_file(
    path: Union[str, Path], options: Optional[BotServerOptions] = None
) -> None:
    """Write options as KEY=VALUE lines; unset options are left empty."""
    if options is None:
        options = BotServerOptions()

    lines = []
    for field, env_var in ENV_VARS.items():
        value = getattr(options, field)
        lines.append(f"{env_var}={'' if value is None else value}")

    Path(path).write_text("\n".join(lines) + "\n", encoding="utf-8")
