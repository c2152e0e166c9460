"""Availability model definitions."""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import relationship
from campus_booking.database import Base

AVAILABLE_STATUS = "available"
BOOKED_STATUS = "booked"
SLOT_STATUSES = (AVAILABLE_STATUS, BOOKED_STATUS)


class Availability(Base):
    """A professor-declared time interval on a given date that students can book."""
    __tablename__ = "availability"
    __table_args__ = (
        UniqueConstraint("professor_id", "date", "start_time", "end_time", name="uq_availability_professor_slot"),
    )

    id = Column(Integer, primary_key=True)
    professor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # HH:MM
    end_time = Column(String(5), nullable=False)  # HH:MM
    is_booked = Column(Boolean, default=False, nullable=False)
    booked_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    professor = relationship("User", foreign_keys=[professor_id])
