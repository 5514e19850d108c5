"""Exceptions raised while resolving and validating bot server options."""


class BotServerError(Exception):
    """Base class for bot server configuration errors."""


class MissingOptionError(BotServerError, ValueError):
    """A required option was not supplied."""

    def __init__(self, field: str, env_var: str):
        self.field = field
        self.env_var = env_var
        super().__init__(
            f"Missing options.{field}\nPlease set {env_var} environment variable."
        )


class InvalidOptionError(BotServerError, ValueError):
    """An option was supplied but cannot be interpreted."""


class CredentialNotFoundError(BotServerError, FileNotFoundError):
    """A key or certificate path does not exist on disk."""


class MalformedCredentialError(BotServerError, ValueError):
    """A key or certificate file does not hold PEM material."""
