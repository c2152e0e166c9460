"""Identity lookups and user provisioning."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_booking.core.errors import ConflictError, ValidationError
from campus_booking.models.user import PROFESSOR_ROLE, USER_ROLES, User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def find_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def find_users_by_role(db: Session, role: str) -> list[User]:
    return db.query(User).filter(User.role == role).order_by(User.name.asc()).all()


def create_user(
    db: Session,
    *,
    name: str,
    email: str,
    role: str,
    department: str | None = None,
    hashed_password: str | None = None,
) -> User:
    normalized_email = normalize_email(email)
    normalized_name = (name or "").strip()
    normalized_role = (role or "").strip().lower()
    normalized_department = (department or "").strip() or None

    if not normalized_name:
        raise ValidationError("Name is required.")
    if "@" not in normalized_email:
        raise ValidationError("A valid email is required.")
    if normalized_role not in USER_ROLES:
        raise ValidationError(f"Role must be one of: {', '.join(USER_ROLES)}.")
    if normalized_role == PROFESSOR_ROLE and not normalized_department:
        raise ValidationError("Department is required for professors.")

    if find_user_by_email(db, normalized_email) is not None:
        raise ConflictError("A user with this email already exists.")

    user = User(
        name=normalized_name,
        email=normalized_email,
        role=normalized_role,
        department=normalized_department if normalized_role == PROFESSOR_ROLE else None,
        hashed_password=hashed_password,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("A user with this email already exists.") from exc
    db.refresh(user)

    logger.info("Created %s account %s", user.role, user.email, extra={"user_id": user.id})
    return user
