"""Response envelope and serializers shared by the routers."""

from datetime import date
from typing import Generic, TypeVar

from fastapi import Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from campus_booking.database import get_db
from campus_booking.services.booking import BookingCoordinator

T = TypeVar('T')


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str | None = None
    data: T | None = None
    errors: list | None = None


class UserSummaryResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    department: str | None = None

    class Config:
        from_attributes = True


class SlotResponse(BaseModel):
    id: int
    professor: UserSummaryResponse
    date: date
    start_time: str
    end_time: str
    is_booked: bool
    booked_by_id: int | None = None

    class Config:
        from_attributes = True


class AppointmentResponse(BaseModel):
    id: int
    student: UserSummaryResponse
    professor: UserSummaryResponse
    availability_id: int | None = None
    date: date
    start_time: str
    end_time: str
    notes: str | None = ''
    status: str

    class Config:
        from_attributes = True


def get_coordinator(db: Session = Depends(get_db)) -> BookingCoordinator:
    return BookingCoordinator(db)


def envelope(data=None, message: str | None = None) -> dict:
    body = {'success': True, 'data': data}
    if message:
        body['message'] = message
    return body


def error_envelope(message: str, errors: list | None = None) -> dict:
    body = {'success': False, 'message': message}
    if errors:
        body['errors'] = errors
    return body
