from datetime import date

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator

from campus_booking.auth.dependencies import get_current_user, require_role
from campus_booking.models.user import PROFESSOR_ROLE, User
from campus_booking.routes.common import (
    Envelope,
    SlotResponse,
    UserSummaryResponse,
    envelope,
    get_coordinator,
)
from campus_booking.services.booking import BookingCoordinator

router = APIRouter(tags=['availability'])


class CreateSlotRequest(BaseModel):
    date: date
    start_time: str = Field(alias='startTime')
    end_time: str = Field(alias='endTime')

    class Config:
        populate_by_name = True

    @field_validator('start_time', 'end_time')
    @classmethod
    def strip_time(cls, value: str) -> str:
        return value.strip()


@router.post('', response_model=Envelope[SlotResponse], status_code=status.HTTP_201_CREATED)
def create_slot(
    data: CreateSlotRequest,
    current_user: User = Depends(require_role(PROFESSOR_ROLE)),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    slot = coordinator.create_slot(current_user, data.date, data.start_time, data.end_time)
    return envelope(SlotResponse.model_validate(slot), 'Availability slot created successfully')


@router.get('/mine', response_model=Envelope[list[SlotResponse]])
def list_my_slots(
    slot_date: date | None = Query(default=None, alias='date'),
    slot_status: str | None = Query(default=None, alias='status'),
    current_user: User = Depends(require_role(PROFESSOR_ROLE)),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    slots = coordinator.list_own_slots(current_user, slot_date=slot_date, status=slot_status)
    return envelope([SlotResponse.model_validate(slot) for slot in slots])


@router.get('/professors', response_model=Envelope[list[UserSummaryResponse]])
def list_professors(
    current_user: User = Depends(get_current_user),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    del current_user
    professors = coordinator.list_professors()
    return envelope([UserSummaryResponse.model_validate(professor) for professor in professors])


@router.get('/by-professor/{professor_id}', response_model=Envelope[list[SlotResponse]])
def list_professor_open_slots(
    professor_id: int,
    slot_date: date | None = Query(default=None, alias='date'),
    current_user: User = Depends(get_current_user),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    del current_user
    slots = coordinator.list_available_slots(professor_id, slot_date=slot_date)
    return envelope([SlotResponse.model_validate(slot) for slot in slots])


@router.delete('/{slot_id}', response_model=Envelope[None])
def delete_slot(
    slot_id: int,
    current_user: User = Depends(require_role(PROFESSOR_ROLE)),
    coordinator: BookingCoordinator = Depends(get_coordinator),
):
    coordinator.delete_slot(current_user, slot_id)
    return envelope(message='Availability slot deleted successfully')
