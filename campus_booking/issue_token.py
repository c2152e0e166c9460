"""Provision a user if needed and print an access token to stdout.

Usage:
    python -m campus_booking.issue_token --email prof@college.edu \\
        --name "Professor P1" --role professor --department "Computer Science"
"""
import argparse
import sys

from campus_booking.auth.jwt_handler import create_access_token
from campus_booking.core.errors import BookingError
from campus_booking.database import Base, SessionLocal, engine
from campus_booking.models import appointment, availability  # noqa: F401
from campus_booking.models.user import USER_ROLES
from campus_booking.services.identity import create_user, find_user_by_email


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", help="Required when the user does not exist yet.")
    parser.add_argument("--role", choices=USER_ROLES, default="student")
    parser.add_argument("--department")
    parser.add_argument("--expires-minutes", type=int)
    return parser


def main(argv: list[str] | None = None, session_factory=SessionLocal) -> int:
    args = build_parser().parse_args(argv)

    db = session_factory()
    try:
        user = find_user_by_email(db, args.email)
        if user is None:
            user = create_user(
                db,
                name=args.name or "",
                email=args.email,
                role=args.role,
                department=args.department,
            )
        token = create_access_token(subject=user.id, role=user.role, expires_minutes=args.expires_minutes)
    except BookingError as exc:
        print(f"Could not issue token: {exc.message}", file=sys.stderr)
        return 1
    finally:
        db.close()

    print(token)
    return 0


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    sys.exit(main())
