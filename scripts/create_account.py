"""Create an API account for calling the conference API."""

from __future__ import annotations

import argparse
from dataclasses import replace
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from conference_central.config import load_settings
from conference_central.database import resolve_database_path


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a Conference Central API account")
    parser.add_argument("email", help="Email address of the account owner")
    parser.add_argument(
        "--user-id",
        default=None,
        help="Stable user id for the account (default: a random id)",
    )
    parser.add_argument(
        "--db-path",
        default=None,
        help="Override the database location (defaults to CONFERENCE_DB_PATH or the repository data directory)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(list(argv) if argv is not None else None)

    settings = load_settings()
    if args.db_path:
        settings = replace(settings, database_path=resolve_database_path(args.db_path))
    database = settings.open_database()

    try:
        account, api_key = database.create_account(args.email, user_id=args.user_id)
    except ValueError as exc:  # duplicates, etc.
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created account {account.user_id} <{account.email}> in {settings.database_path}")
    print("Generated API key:")
    print(api_key)
    print("\nStore this value securely; it will not be shown again.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
