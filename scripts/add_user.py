#!/usr/bin/env python3
"""
Create a user directly in the configured database.

Usage:
  python scripts/add_user.py --username ann_lee1 --email ann@example.com \
      --first-name Ann --last-name Lee [--permission-level 15] [--password ...]
"""
from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path

# Make the account_api package importable when run directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from account_api.core.config import get_settings  # noqa: E402
from account_api.core.security import CredentialHasher  # noqa: E402
from account_api.db.session import Database  # noqa: E402
from account_api.domain.errors import UniquenessError, ValidationError  # noqa: E402
from account_api.domain.users import permission_names  # noqa: E402
from account_api.repositories.user_repository import UserRepository  # noqa: E402
from account_api.services.account_service import AccountService  # noqa: E402


def main() -> None:
    ap = argparse.ArgumentParser(description="Create a user record")
    ap.add_argument("--username", required=True)
    ap.add_argument("--email", required=True)
    ap.add_argument("--first-name", required=True)
    ap.add_argument("--last-name", required=True)
    ap.add_argument("--permission-level", type=int, default=1, help="One of 1,2,3,4,5,6,8,9,10,12,15 (default: 1)")
    ap.add_argument("--password", help="Password (prompted when omitted)")
    args = ap.parse_args()

    password = args.password or getpass.getpass("Password: ")
    settings = get_settings()
    database = Database(settings.database_url)
    try:
        database.create_all()
        svc = AccountService(UserRepository(database), CredentialHasher.from_settings(settings))
        try:
            user = svc.register(
                {
                    "firstName": args.first_name,
                    "lastName": args.last_name,
                    "email": args.email,
                    "username": args.username,
                    "password": password,
                    "permissionLevel": args.permission_level,
                }
            )
        except ValidationError as exc:
            for field, message in exc.errors.items():
                sys.stderr.write(f"  {field}: {message}\n")
            raise SystemExit("Invalid user data")
        except UniquenessError as exc:
            raise SystemExit(exc.message)
    finally:
        database.dispose()

    print("OK: user created")
    print(f"  ID: {user.id}")
    print(f"  Username: {user.username}")
    print(f"  Email: {user.email}")
    print(f"  Permissions: {', '.join(permission_names(user.permission_level))}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
