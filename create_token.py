#!/usr/bin/env python3
"""
Issue an access token for a NapChart user.

The API does not log users in itself; operators mint tokens with this
script.  With ``--create`` the user is registered first if the login is
unknown, which is how the very first administrator is bootstrapped.

Usage:
    python create_token.py --login admin --roles ROLE_ADMIN,ROLE_USER --create
    python create_token.py --login alice --days 30
"""

import argparse
import sys

from napchart_api.app.core.db import init_db
from napchart_api.app.core.security import Role, create_access_token
from napchart_api.app.repositories.user_repository import UserRepository
from napchart_api.app.schemas.user import UserCreate


def main() -> None:
    ap = argparse.ArgumentParser(description="Issue a NapChart API access token.")
    ap.add_argument("--login", required=True, help="Login of the user the token is for")
    ap.add_argument("--roles", default=None, help="Comma-separated roles; defaults to the user's stored roles")
    ap.add_argument("--days", type=int, default=365, help="Token lifetime in days")
    ap.add_argument("--create", action="store_true", help="Register the user if the login is unknown")
    args = ap.parse_args()

    init_db()
    users = UserRepository()
    user = users.find_by_login(args.login)
    requested = Role.parse_many(args.roles.split(",")) if args.roles else None
    if user is None:
        if not args.create:
            print(f"[!] No user found with login: {args.login}", file=sys.stderr)
            sys.exit(2)
        user = users.create(UserCreate(login=args.login, authorities=sorted(requested or {Role.USER})))
        print(f"[+] Registered user: {user.login}", file=sys.stderr)

    roles = requested if requested is not None else frozenset(user.authorities)
    print(create_access_token(user.login, roles, expires_delta=args.days * 24 * 60 * 60))


if __name__ == "__main__":
    main()
