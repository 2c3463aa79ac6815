"""
Create a user (e.g. the first admin). Run from project root:
  python -m app.scripts.create_user USERNAME EMAIL PASSWORD [--full-name NAME] [--role-id ID]
Example:
  python -m app.scripts.create_user admin admin@example.com your-secure-password --role-id 99
"""
import argparse
import sys

from app.core.database import SessionLocal
from app.core.security import (
    FULLNAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    hash_password,
)
from app.models import ROLE_ADMIN_ID, ROLE_GUEST_ID, ROLE_USER_ID, User
from app.services.accounts import get_role, normalize_email, username_or_email_taken


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a user without going through /api/auth/register.")
    parser.add_argument("username", help=f"Username (1-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("--full-name", default=None, help="Full name (defaults to the username)")
    parser.add_argument(
        "--role-id",
        type=int,
        default=ROLE_GUEST_ID,
        choices=[ROLE_USER_ID, ROLE_GUEST_ID, ROLE_ADMIN_ID],
        help="1 = User, 2 = Guest (default), 99 = Admin",
    )
    args = parser.parse_args(argv)

    username = args.username.strip()
    email = normalize_email(args.email)
    full_name = (args.full_name or username).strip()
    if not username or len(username) > USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if "@" not in email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if len(full_name) > FULLNAME_MAX_LEN:
        print("Full name is too long.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        if get_role(db, args.role_id) is None:
            print(f"Role {args.role_id} does not exist; run app.scripts.init_db or migrations first.", file=sys.stderr)
            return 1
        if username_or_email_taken(db, username, email):
            print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
            return 1
        user = User(
            username=username,
            email=email,
            full_name=full_name,
            password_hash=hash_password(args.password),
            role_id=args.role_id,
        )
        db.add(user)
        db.commit()
        print(f"Created user '{username}' with role id {args.role_id}.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
