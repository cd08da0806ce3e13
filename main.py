"""Command-line interface for the Conference Central backend."""

from __future__ import annotations
import argparse
import logging
import sys
from typing import Sequence

from conference_central.config import Settings, load_settings
from conference_central.database import Database

logger = logging.getLogger("conference_central.main")

_KNOWN_COMMANDS = {"serve", "init-db", "create-account", "rotate-key"}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Conference Central backend utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser("init-db", help="Initialise the conference database")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP conference API")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for the HTTP API (default: 8080)",
    )

    account_parser = subparsers.add_parser(
        "create-account", help="Create an API account and print its key"
    )
    account_parser.add_argument("email", help="Email address of the account")
    account_parser.add_argument(
        "--user-id",
        default=None,
        help="Stable user id for the account (default: a random id)",
    )

    rotate_parser = subparsers.add_parser("rotate-key", help="Issue a new API key for an account")
    rotate_parser.add_argument("user_id", help="User id of the account")

    args_list = list(argv) if argv is not None else sys.argv[1:]

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in _KNOWN_COMMANDS:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _initialise_database(settings: Settings) -> Database:
    database = settings.open_database()
    logger.info("Database initialised at %s", settings.database_path)
    return database


def _serve(*, database: Database, host: str, port: int) -> None:
    from conference_central.api import create_app
    import uvicorn

    logger.info("Starting conference API on http://%s:%s", host, port)
    app = create_app(database=database)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _create_account(database: Database, email: str, user_id: str | None) -> int:
    try:
        account, api_key = database.create_account(email, user_id=user_id)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created account {account.user_id} <{account.email}>")
    print("API key:")
    print(api_key)
    print("\nStore this value securely; it will not be shown again.")
    return 0


def _rotate_key(database: Database, user_id: str) -> int:
    try:
        account, api_key = database.rotate_api_key(user_id)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"New API key for {account.user_id} <{account.email}>:")
    print(api_key)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    try:
        settings = load_settings()
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2
    database = _initialise_database(settings)

    if args.command == "serve":
        _serve(database=database, host=args.host, port=args.port)
    elif args.command == "create-account":
        return _create_account(database, args.email, args.user_id)
    elif args.command == "rotate-key":
        return _rotate_key(database, args.user_id)
    elif args.command == "init-db":
        print("Database initialisation complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
