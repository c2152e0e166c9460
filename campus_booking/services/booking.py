"""Booking coordinator.

Owns every write to ``availability.is_booked`` and ``appointments.status`` so
that a slot is marked booked exactly when a non-cancelled appointment
references it. Each public operation runs in a single database transaction.
"""

import logging
import re
from collections.abc import Callable
from datetime import date, datetime, time

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from campus_booking.core import config
from campus_booking.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from campus_booking.models.appointment import (
    APPOINTMENT_STATUSES,
    CANCELLED_STATUS,
    CONFIRMED_STATUS,
    Appointment,
)
from campus_booking.models.availability import BOOKED_STATUS, SLOT_STATUSES, Availability
from campus_booking.models.user import PROFESSOR_ROLE, STUDENT_ROLE, User
from campus_booking.services.identity import find_user_by_id, find_users_by_role
from campus_booking.services.viewers import Viewer

logger = logging.getLogger(__name__)

CLOCK_TIME_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$')


def parse_clock_time(value: str, label: str = 'Time') -> time:
    match = CLOCK_TIME_PATTERN.match((value or '').strip())
    if not match:
        raise ValidationError(f'{label} must be in HH:MM format')
    return time(int(match.group(1)), int(match.group(2)))


def format_clock_time(value: time) -> str:
    return value.strftime('%H:%M')


def parse_slot_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as exc:
        raise ValidationError('Please provide a valid date in ISO format') from exc


def normalize_notes(notes: str | None) -> str:
    normalized = (notes or '').strip()
    if len(normalized) > config.MAX_APPOINTMENT_NOTES_LENGTH:
        raise ValidationError(f'Notes cannot exceed {config.MAX_APPOINTMENT_NOTES_LENGTH} characters')
    return normalized


def slot_starts_at(slot: Availability) -> datetime:
    return datetime.combine(slot.date, parse_clock_time(slot.start_time))


class BookingCoordinator:
    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.now) -> None:
        self.db = db
        self.clock = clock

    # Availability

    def create_slot(self, professor: User, slot_date: date | str, start_time: str, end_time: str) -> Availability:
        self._require_role(professor, PROFESSOR_ROLE, 'Only professors can create availability slots.')

        slot_date = parse_slot_date(slot_date)
        start = parse_clock_time(start_time, 'Start time')
        end = parse_clock_time(end_time, 'End time')
        if end <= start:
            raise ValidationError('End time must be after start time')

        start_text = format_clock_time(start)
        end_text = format_clock_time(end)

        existing_slot = self.db.query(Availability).filter(
            Availability.professor_id == professor.id,
            Availability.date == slot_date,
            Availability.start_time == start_text,
            Availability.end_time == end_text,
        ).first()
        if existing_slot:
            raise ConflictError('This time slot already exists')

        slot = Availability(
            professor_id=professor.id,
            date=slot_date,
            start_time=start_text,
            end_time=end_text,
            is_booked=False,
        )
        self.db.add(slot)
        self._commit(conflict_message='This time slot already exists')
        self.db.refresh(slot)

        logger.info(
            'Professor %s opened slot %s %s-%s', professor.id, slot_date, start_text, end_text,
            extra={'user_id': professor.id, 'slot_id': slot.id},
        )
        return slot

    def list_own_slots(
        self,
        professor: User,
        slot_date: date | None = None,
        status: str | None = None,
    ) -> list[Availability]:
        self._require_role(professor, PROFESSOR_ROLE, 'Only professors can view their availability slots.')

        query = self.db.query(Availability).filter(Availability.professor_id == professor.id)

        if slot_date is not None:
            query = query.filter(Availability.date == parse_slot_date(slot_date))

        if status:
            if status not in SLOT_STATUSES:
                raise ValidationError(f"Status must be one of: {', '.join(SLOT_STATUSES)}")
            query = query.filter(Availability.is_booked.is_(status == BOOKED_STATUS))

        return query.order_by(Availability.date.asc(), Availability.start_time.asc()).all()

    def list_available_slots(self, professor_id: int, slot_date: date | None = None) -> list[Availability]:
        professor = find_user_by_id(self.db, professor_id)
        if professor is None or professor.role != PROFESSOR_ROLE:
            raise NotFoundError('Professor not found')

        query = self.db.query(Availability).filter(
            Availability.professor_id == professor.id,
            Availability.is_booked.is_(False),
            Availability.date >= self.clock().date(),
        )

        if slot_date is not None:
            query = query.filter(Availability.date == parse_slot_date(slot_date))

        return query.order_by(Availability.date.asc(), Availability.start_time.asc()).all()

    def list_professors(self) -> list[User]:
        return find_users_by_role(self.db, PROFESSOR_ROLE)

    def delete_slot(self, professor: User, slot_id: int) -> None:
        self._require_role(professor, PROFESSOR_ROLE, 'Only professors can delete availability slots.')

        slot = self.db.query(Availability).filter(
            Availability.id == slot_id,
            Availability.professor_id == professor.id,
        ).first()
        if not slot:
            raise NotFoundError('Availability slot not found')

        if slot.is_booked:
            raise ConflictError('Cannot delete booked slot. Cancel the appointment first.')

        deleted = self.db.query(Availability).filter(
            Availability.id == slot.id,
            Availability.is_booked.is_(False),
        ).delete(synchronize_session=False)
        if deleted != 1:
            self.db.rollback()
            raise ConflictError('Cannot delete booked slot. Cancel the appointment first.')

        self._commit()
        logger.info('Professor %s deleted slot %s', professor.id, slot_id, extra={'user_id': professor.id, 'slot_id': slot_id})

    # Appointments

    def book_slot(self, student: User, slot_id: int, notes: str | None = None) -> Appointment:
        self._require_role(student, STUDENT_ROLE, 'Only students can book appointments.')

        slot = self.db.get(Availability, slot_id)
        if slot is None:
            raise NotFoundError('Availability slot not found')

        if slot.is_booked:
            raise ConflictError('This time slot is already booked')

        if slot_starts_at(slot) < self.clock():
            raise ValidationError('Cannot book past time slots')

        notes = normalize_notes(notes)

        # Claim the slot only if it is still free at write time.
        claimed = self.db.query(Availability).filter(
            Availability.id == slot.id,
            Availability.is_booked.is_(False),
        ).update(
            {Availability.is_booked: True, Availability.booked_by_id: student.id},
            synchronize_session=False,
        )
        if claimed != 1:
            self.db.rollback()
            logger.warning(
                'Student %s lost the race for slot %s', student.id, slot_id,
                extra={'user_id': student.id, 'slot_id': slot_id},
            )
            raise ConflictError('This time slot is already booked')

        appointment = Appointment(
            student_id=student.id,
            professor_id=slot.professor_id,
            availability_id=slot.id,
            date=slot.date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            notes=notes,
            status=CONFIRMED_STATUS,
        )
        self.db.add(appointment)
        self._commit(conflict_message='This time slot is already booked')
        self.db.refresh(appointment)

        logger.info(
            'Student %s booked slot %s', student.id, slot_id,
            extra={'user_id': student.id, 'slot_id': slot_id, 'appointment_id': appointment.id},
        )
        return appointment

    def cancel_appointment(self, professor: User, appointment_id: int) -> Appointment:
        appointment = self._owned_appointment(professor, appointment_id)

        if appointment.status == CANCELLED_STATUS:
            raise ConflictError('Appointment is already cancelled')

        return self._cancel(appointment)

    def update_appointment_status(self, professor: User, appointment_id: int, new_status: str) -> Appointment:
        if new_status not in APPOINTMENT_STATUSES:
            raise ValidationError('Invalid status')

        appointment = self._owned_appointment(professor, appointment_id)

        if new_status == CANCELLED_STATUS:
            if appointment.status == CANCELLED_STATUS:
                raise ConflictError('Appointment is already cancelled')
            return self._cancel(appointment)

        if appointment.status == CANCELLED_STATUS:
            raise ConflictError('Cancelled appointments cannot be reopened')

        changed = self.db.query(Appointment).filter(
            Appointment.id == appointment.id,
            Appointment.status != CANCELLED_STATUS,
        ).update(
            {Appointment.status: new_status, Appointment.updated_at: func.now()},
            synchronize_session=False,
        )
        if changed != 1:
            self.db.rollback()
            raise ConflictError('Cancelled appointments cannot be reopened')

        self._commit()
        self.db.refresh(appointment)

        logger.info(
            'Appointment %s moved to %s', appointment.id, new_status,
            extra={'user_id': professor.id, 'appointment_id': appointment.id},
        )
        return appointment

    def list_appointments(
        self,
        viewer: Viewer,
        status: str | None = None,
        appointment_date: date | None = None,
    ) -> list[Appointment]:
        query = viewer.scope(self.db.query(Appointment))

        if status:
            if status not in APPOINTMENT_STATUSES:
                raise ValidationError('Invalid status')
            query = query.filter(Appointment.status == status)

        if appointment_date is not None:
            query = query.filter(Appointment.date == parse_slot_date(appointment_date))

        return query.order_by(Appointment.date.asc(), Appointment.start_time.asc()).all()

    def get_appointment(self, viewer: Viewer, appointment_id: int) -> Appointment:
        appointment = viewer.scope(
            self.db.query(Appointment).filter(Appointment.id == appointment_id)
        ).first()
        if appointment is None:
            raise NotFoundError('Appointment not found')
        return appointment

    # Helpers

    def _cancel(self, appointment: Appointment) -> Appointment:
        changed = self.db.query(Appointment).filter(
            Appointment.id == appointment.id,
            Appointment.status != CANCELLED_STATUS,
        ).update(
            {Appointment.status: CANCELLED_STATUS, Appointment.updated_at: func.now()},
            synchronize_session=False,
        )
        if changed != 1:
            self.db.rollback()
            raise ConflictError('Appointment is already cancelled')

        # A slot deleted out from under the appointment does not block cancellation.
        if appointment.availability_id is not None:
            self.db.query(Availability).filter(
                Availability.id == appointment.availability_id,
            ).update(
                {Availability.is_booked: False, Availability.booked_by_id: None},
                synchronize_session=False,
            )

        self._commit()
        self.db.refresh(appointment)

        logger.info(
            'Appointment %s cancelled; slot %s released', appointment.id, appointment.availability_id,
            extra={'appointment_id': appointment.id, 'slot_id': appointment.availability_id},
        )
        return appointment

    def _owned_appointment(self, professor: User, appointment_id: int) -> Appointment:
        self._require_role(professor, PROFESSOR_ROLE, 'Only professors can manage appointments.')

        appointment = self.db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.professor_id == professor.id,
        ).first()
        if not appointment:
            raise NotFoundError('Appointment not found')
        return appointment

    def _require_role(self, user: User, role: str, message: str) -> None:
        if user is None or user.role != role:
            raise ForbiddenError(message)

    def _commit(self, conflict_message: str | None = None) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if conflict_message is None:
                raise
            raise ConflictError(conflict_message) from exc
        except Exception:
            self.db.rollback()
            raise
