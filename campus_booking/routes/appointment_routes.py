from datetime import date

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator

from campus_booking.auth.dependencies import get_current_user, require_role
from campus_booking.models.appointment import APPOINTMENT_STATUSES
from campus_booking.models.user import PROFESSOR_ROLE, STUDENT_ROLE, User
from campus_booking.routes.common import AppointmentResponse, Envelope, envelope, get_coordinator
from campus_booking.services.booking import BookingCoordinator
from campus_booking.services.viewers import viewer_for

router = APIRouter(tags=['appointments'])


class BookSlotRequest(BaseModel):
    availability_id: int = Field(alias='availabilityId')
    notes: str | None = None

    class Config:
        populate_by_name = True


class UpdateStatusRequest(BaseModel):
    status: str

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in APPOINTMENT_STATUSES:
            raise ValueError('Invalid status')
        return normalized


@router.post('/book', response_model=Envelope[AppointmentResponse], status_code=status.HTTP_201_CREATED)
def book_slot(
    data: BookSlotRequest,
    current_user: User = Depends(require_role(STUDENT_ROLE)),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    appointment = coordinator.book_slot(current_user, data.availability_id, data.notes)
    return envelope(AppointmentResponse.model_validate(appointment), 'Appointment booked successfully')


@router.get('/mine', response_model=Envelope[list[AppointmentResponse]])
def list_my_appointments(
    appointment_status: str | None = Query(default=None, alias='status'),
    appointment_date: date | None = Query(default=None, alias='date'),
    current_user: User = Depends(require_role(STUDENT_ROLE)),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    appointments = coordinator.list_appointments(
        viewer_for(current_user),
        status=appointment_status,
        appointment_date=appointment_date,
    )
    return envelope([AppointmentResponse.model_validate(appointment) for appointment in appointments])


@router.get('/by-professor', response_model=Envelope[list[AppointmentResponse]])
def list_professor_appointments(
    appointment_status: str | None = Query(default=None, alias='status'),
    appointment_date: date | None = Query(default=None, alias='date'),
    current_user: User = Depends(require_role(PROFESSOR_ROLE)),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    appointments = coordinator.list_appointments(
        viewer_for(current_user),
        status=appointment_status,
        appointment_date=appointment_date,
    )
    return envelope([AppointmentResponse.model_validate(appointment) for appointment in appointments])


@router.put('/{appointment_id}/cancel', response_model=Envelope[AppointmentResponse])
def cancel_appointment(
    appointment_id: int,
    current_user: User = Depends(require_role(PROFESSOR_ROLE)),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    appointment = coordinator.cancel_appointment(current_user, appointment_id)
    return envelope(AppointmentResponse.model_validate(appointment), 'Appointment cancelled successfully')


@router.put('/{appointment_id}/status', response_model=Envelope[AppointmentResponse])
def update_appointment_status(
    appointment_id: int,
    data: UpdateStatusRequest,
    current_user: User = Depends(require_role(PROFESSOR_ROLE)),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    appointment = coordinator.update_appointment_status(current_user, appointment_id, data.status)
    return envelope(AppointmentResponse.model_validate(appointment), 'Appointment status updated successfully')


@router.get('/{appointment_id}', response_model=Envelope[AppointmentResponse])
def get_appointment(
    appointment_id: int,
    current_user: User = Depends(get_current_user),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    appointment = coordinator.get_appointment(viewer_for(current_user), appointment_id)
    return envelope(AppointmentResponse.model_validate(appointment))
