"""User model definitions."""

from sqlalchemy import Column, DateTime, Integer, String, func
from campus_booking.database import Base

STUDENT_ROLE = "student"
PROFESSOR_ROLE = "professor"
USER_ROLES = (STUDENT_ROLE, PROFESSOR_ROLE)


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True)
    role = Column(String, nullable=False, index=True)  # student/professor
    department = Column(String, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
