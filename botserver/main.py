"""Command line entry point for the bot server."""

import argparse
import asyncio
import sys
from typing import List, Optional

from botserver.certificates import DEFAULT_CERT_DAYS, DEFAULT_SSL_DIR, ensure_default_certificate
from botserver.config import generate_env_file, get_env_options
from botserver.errors import BotServerError
from botserver.logging_utils import log_error, log_event
from botserver.server import BotServer


def positive_int(value: str) -> int:
    """Argparse type accepting integers greater than zero."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def parse_cli_args(argv: List[str]) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="LINE bot HTTPS server")
    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", help="Run the HTTPS bot server")
    serve.add_argument("--env-file", help="Path to an env file with bot options")
    serve.add_argument(
        "--webhook-path",
        default="/webhook",
        help="Path that receives LINE webhook events",
    )

    generate_env = commands.add_parser(
        "generate-env", help="Write an env file template"
    )
    generate_env.add_argument("path", help="Env file to write")
    generate_env.add_argument(
        "--from-environment",
        action="store_true",
        help="Fill values from the current environment",
    )

    generate_ssl = commands.add_parser(
        "generate-ssl", help="Create a default TLS key and certificate"
    )
    generate_ssl.add_argument("--directory", default=str(DEFAULT_SSL_DIR))
    generate_ssl.add_argument("--days", type=positive_int, default=DEFAULT_CERT_DAYS)
    generate_ssl.add_argument(
        "--self-signed",
        action=argparse.BooleanOptionalAction,
        default=True,
    )

    return parser.parse_args(argv)


def _log_events(events) -> None:
    log_event("Webhook events received", events=len(events))


def main(argv: Optional[List[str]] = None) -> int:
    """Run the selected command and return the exit code."""
    args = parse_cli_args(sys.argv[1:] if argv is None else argv)

    try:
        if args.command == "serve":
            server = BotServer(env_path=args.env_file)
            server.set_webhook(args.webhook_path, _log_events)
            server.start()
        elif args.command == "generate-env":
            options = get_env_options() if args.from_environment else None
            generate_env_file(args.path, options)
            log_event("Env file written", path=args.path)
        elif args.command == "generate-ssl":
            asyncio.run(
                ensure_default_certificate(
                    args.directory, days=args.days, self_signed=args.self_signed
                )
            )
            log_event("TLS credentials ready", path=args.directory)
    except BotServerError as exc:
        log_error(str(exc))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
