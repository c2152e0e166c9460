import os
from datetime import date, datetime

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
os.environ.setdefault('JWT_SECRET_KEY', 'campus-booking-test-secret-0123456789')

from campus_booking.auth.jwt_handler import create_access_token  # noqa: E402
from campus_booking.database import Base, get_db  # noqa: E402
from campus_booking.main import app  # noqa: E402
from campus_booking.routes.common import get_coordinator  # noqa: E402
from campus_booking.services.booking import BookingCoordinator  # noqa: E402
from campus_booking.services.identity import create_user  # noqa: E402

# Monday morning; "tomorrow" is a regular teaching day.
NOW = datetime(2026, 3, 2, 9, 0)
TODAY = date(2026, 3, 2)
TOMORROW = date(2026, 3, 3)
YESTERDAY = date(2026, 3, 1)


def fixed_clock() -> datetime:
    return NOW


@pytest.fixture
def session_factory():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def coordinator(db):
    return BookingCoordinator(db, clock=fixed_clock)


@pytest.fixture
def professor(db):
    return create_user(
        db,
        name='Professor P1',
        email='professor.p1@college.edu',
        role='professor',
        department='Computer Science',
    )


@pytest.fixture
def other_professor(db):
    return create_user(
        db,
        name='Professor P2',
        email='professor.p2@college.edu',
        role='professor',
        department='Mathematics',
    )


@pytest.fixture
def student(db):
    return create_user(db, name='Student A1', email='student.a1@college.edu', role='student')


@pytest.fixture
def other_student(db):
    return create_user(db, name='Student A2', email='student.a2@college.edu', role='student')


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def override_get_coordinator(session: Session = Depends(get_db)) -> BookingCoordinator:
        return BookingCoordinator(session, clock=fixed_clock)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_coordinator] = override_get_coordinator
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(user) -> dict:
    token = create_access_token(subject=user.id, role=user.role)
    return {'Authorization': f'Bearer {token}'}
