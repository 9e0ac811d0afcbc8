#!/usr/bin/env python3
"""
Command line entrypoint for the Lofi API.

Serves the API with uvicorn and provides a few maintenance commands
that work directly on the configured SQLite database.  None of the
commands reveal existing passwords.

Usage::

    lofi-api serve --port 8080
    lofi-api promote --email admin@example.com
    lofi-api create-token --email admin@example.com --days 365
    lofi-api reset-password --email jane@example.com

``--db`` overrides ``DATABASE_URL`` for the maintenance commands.
"""

import argparse
import asyncio
import getpass
import logging
import os
import sys
from typing import List, Optional

from .app.core.config import settings
from .app.core.db import Database
from .app.core.exceptions import ServiceError
from .app.core.logging_config import setup_logging
from .app.core.security import issue_token
from .app.schemas.user import Role
from .app.services.user_service import UserService

logger = logging.getLogger(__name__)


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "lofi_api.app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def _open_database(args: argparse.Namespace) -> Database:
    return Database(args.db or settings.database_url).open()


def _set_role(args: argparse.Namespace, role: Role) -> int:
    with _open_database(args) as db:
        user = asyncio.run(UserService(db, settings).set_role(args.email, role))
    print(f"[+] {user.email} is now {user.role.value}")
    return 0


def _promote(args: argparse.Namespace) -> int:
    return _set_role(args, Role.ADMIN)


def _demote(args: argparse.Namespace) -> int:
    return _set_role(args, Role.REGULAR)


def _create_token(args: argparse.Namespace) -> int:
    with _open_database(args) as db:
        with db.cursor() as cursor:
            row = cursor.execute(
                "SELECT id, role FROM users WHERE email = ?", (args.email.lower(),)
            ).fetchone()
    if not row:
        print(f"[!] No user found with email: {args.email}", file=sys.stderr)
        return 2
    token = issue_token(row["id"], Role(row["role"]), expires_delta=args.days * 24 * 60 * 60)
    print(token)
    return 0


def _reset_password(args: argparse.Namespace) -> int:
    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        return 1
    with _open_database(args) as db:
        asyncio.run(UserService(db, settings).reset_password(args.email, new_password))
    print(f"[+] Password updated for user: {args.email}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lofi-api", description="Lofi API server and maintenance tools.")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    serve.add_argument("--port", type=int, default=int(os.getenv("PORT", "8080")))
    serve.add_argument("--reload", action="store_true", help="Reload on code changes.")
    serve.set_defaults(func=_serve)

    for name, func, help_text in (
        ("promote", _promote, "Give a user the admin role."),
        ("demote", _demote, "Give a user the regular role."),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--email", required=True)
        cmd.add_argument("--db", help="SQLite database path (defaults to DATABASE_URL).")
        cmd.set_defaults(func=func)

    token = sub.add_parser("create-token", help="Print a long-lived access token for a user.")
    token.add_argument("--email", required=True)
    token.add_argument("--days", type=_positive_int, default=365)
    token.add_argument("--db", help="SQLite database path (defaults to DATABASE_URL).")
    token.set_defaults(func=_create_token)

    reset = sub.add_parser("reset-password", help="Set a new password for a user.")
    reset.add_argument("--email", required=True)
    reset.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    reset.add_argument("--db", help="SQLite database path (defaults to DATABASE_URL).")
    reset.set_defaults(func=_reset_password)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(settings)
    try:
        return args.func(args)
    except ServiceError as exc:
        print(f"[!] {exc.message}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
