import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from campus_booking.auth import jwt_handler
from campus_booking.core.errors import UnauthorizedError
from campus_booking.database import get_db
from campus_booking.models.user import User
from campus_booking.services.identity import find_user_by_id

security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise UnauthorizedError("No token, authorization denied")

    try:
        payload = jwt_handler.decode_access_token(credentials.credentials)
    except jwt.PyJWTError as exc:
        raise UnauthorizedError("Invalid token") from exc

    subject = payload.get("sub")
    if not subject or not str(subject).isdigit():
        raise UnauthorizedError("Invalid token subject")

    user = find_user_by_id(db, int(subject))
    if user is None:
        raise UnauthorizedError("User not found")
    return user


def require_role(role: str):
    """Build a dependency that admits only callers with ``role``."""

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. {role.capitalize()} role required.",
            )
        return current_user

    return dependency
