#!/usr/bin/env python3
"""Create an admin account, or promote an existing user to admin.

There is no HTTP route that grants the first admin role, so a fresh
deployment bootstraps it here. Users already signed in keep their old role
until they sign in again.

Usage:
    python scripts/create_admin.py admin@example.com 's3cret!' --name "Site Admin"

    # Against another database:
    DATABASE_URL=sqlite:///./usergate.db python scripts/create_admin.py admin@example.com pw123456
"""

import argparse
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from usergate.database import SessionLocal, init_db
from usergate.errors import ApiError
from usergate.services.users import UserService
from usergate.services.validation import (
    normalize_email,
    validate_email,
    validate_password,
)


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--name", default=None)
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="create tables directly instead of relying on alembic (local SQLite)",
    )
    args = parser.parse_args()

    try:
        validate_email(normalize_email(args.email))
        validate_password(args.password)
    except ApiError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if args.create_tables:
        init_db()

    session = SessionLocal()
    try:
        user = UserService(session).ensure_admin(args.email, args.password, args.name)
        print(f"Admin ready: {user.email} (id {user.id})")
    finally:
        session.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
