"""Role-specific visibility rules for appointments."""

from sqlalchemy.orm import Query

from campus_booking.core.errors import ForbiddenError
from campus_booking.models.appointment import Appointment
from campus_booking.models.user import PROFESSOR_ROLE, STUDENT_ROLE, User


class Viewer:
    """Narrows appointment queries to the rows a caller participates in."""

    role: str = ""

    def __init__(self, user: User) -> None:
        self.user = user

    def scope(self, query: Query) -> Query:
        raise NotImplementedError


class StudentViewer(Viewer):
    role = STUDENT_ROLE

    def scope(self, query: Query) -> Query:
        return query.filter(Appointment.student_id == self.user.id)


class ProfessorViewer(Viewer):
    role = PROFESSOR_ROLE

    def scope(self, query: Query) -> Query:
        return query.filter(Appointment.professor_id == self.user.id)


_VIEWERS = {viewer.role: viewer for viewer in (StudentViewer, ProfessorViewer)}


def viewer_for(user: User) -> Viewer:
    viewer_class = _VIEWERS.get(user.role)
    if viewer_class is None:
        raise ForbiddenError("Your role cannot view appointments.")
    return viewer_class(user)
