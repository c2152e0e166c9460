"""Appointment model definitions."""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship
from campus_booking.database import Base

PENDING_STATUS = "pending"
CONFIRMED_STATUS = "confirmed"
CANCELLED_STATUS = "cancelled"
COMPLETED_STATUS = "completed"
APPOINTMENT_STATUSES = (PENDING_STATUS, CONFIRMED_STATUS, CANCELLED_STATUS, COMPLETED_STATUS)


class Appointment(Base):
    """Represents a student's booking of an availability slot.

    Date and times are copied from the slot when it is booked so the record
    survives later changes to availability.
    """
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    professor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    availability_id = Column(Integer, ForeignKey("availability.id", ondelete="SET NULL"), nullable=True)
    date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    notes = Column(String(500), default="")
    status = Column(String, default=CONFIRMED_STATUS, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    student = relationship("User", foreign_keys=[student_id])
    professor = relationship("User", foreign_keys=[professor_id])
