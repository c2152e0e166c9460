import logging

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool

from campus_booking import database
from campus_booking.core import config
from campus_booking.core.logging import KeyValueFormatter, setup_logging
from campus_booking.main import app
from campus_booking.routes.common import get_coordinator
from conftest import auth_headers


def test_root_reports_running(client) -> None:
    response = client.get('/')

    assert response.status_code == 200
    assert response.json()['success'] is True


def test_unknown_route_uses_error_envelope(client) -> None:
    response = client.get('/nowhere')

    assert response.status_code == 404
    assert response.json()['success'] is False


def test_store_failures_become_generic_internal_errors(client, student, caplog) -> None:
    class BrokenCoordinator:
        def list_professors(self):
            raise OperationalError('SELECT 1', {}, Exception('connection refused'))

    app.dependency_overrides[get_coordinator] = lambda: BrokenCoordinator()

    with caplog.at_level(logging.ERROR, logger='campus_booking.main'):
        response = client.get('/availability/professors', headers=auth_headers(student))

    assert response.status_code == 500
    assert response.json() == {'success': False, 'message': 'Internal server error'}
    assert 'connection refused' not in response.text
    assert 'Database error while handling GET /availability/professors' in caplog.text


def test_key_value_formatter_includes_booking_context() -> None:
    record = logging.LogRecord('campus_booking.services.booking', logging.INFO, __file__, 1, 'Booked', None, None)
    record.slot_id = 7

    rendered = KeyValueFormatter().format(record)

    assert 'level=INFO' in rendered
    assert 'message=Booked' in rendered
    assert 'slot_id=7' in rendered


def test_ensure_booking_schema_adds_lookup_indexes(monkeypatch) -> None:
    engine = create_engine('sqlite://', poolclass=StaticPool)
    database.Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(database, '_booking_schema_checked', False)

    database.ensure_booking_schema(bind=engine)

    availability_indexes = {index['name'] for index in inspect(engine).get_indexes('availability')}
    appointment_indexes = {index['name'] for index in inspect(engine).get_indexes('appointments')}
    assert 'idx_availability_professor_date' in availability_indexes
    assert 'idx_appointments_student_date' in appointment_indexes
    engine.dispose()


def test_unexpected_errors_become_generic_internal_errors(client, student, caplog) -> None:
    class CrashingCoordinator:
        def list_professors(self):
            raise RuntimeError('secret stack detail')

    app.dependency_overrides[get_coordinator] = lambda: CrashingCoordinator()
    unsafe_client = TestClient(app, raise_server_exceptions=False)

    with caplog.at_level(logging.ERROR, logger='campus_booking.main'):
        response = unsafe_client.get('/availability/professors', headers=auth_headers(student))

    assert response.status_code == 500
    assert response.headers['content-type'] == 'application/json'
    assert response.json() == {'success': False, 'message': 'Internal server error'}
    assert 'secret stack detail' not in response.text
    assert 'Unhandled error while handling GET /availability/professors' in caplog.text


def test_setup_logging_uses_key_value_lines_in_production(monkeypatch) -> None:
    root_logger = logging.getLogger()
    saved_handlers, saved_level = root_logger.handlers[:], root_logger.level
    monkeypatch.setattr(config, 'APP_ENV', 'production')
    monkeypatch.setattr(config, 'LOG_LEVEL', 'warning')

    try:
        setup_logging()

        assert root_logger.level == logging.WARNING
        assert isinstance(root_logger.handlers[-1].formatter, KeyValueFormatter)
        assert logging.getLogger('sqlalchemy.engine').level == logging.WARNING
    finally:
        root_logger.handlers[:] = saved_handlers
        root_logger.setLevel(saved_level)
