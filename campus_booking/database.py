from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from campus_booking.core import config


def _connect_args(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(config.DATABASE_URL, connect_args=_connect_args(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_booking_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_booking_schema(bind=None) -> None:
    global _booking_schema_checked

    if _booking_schema_checked:
        return

    bind = bind or engine

    with _schema_lock:
        if _booking_schema_checked:
            return

        inspector = inspect(bind)
        table_names = set(inspector.get_table_names())

        with bind.begin() as connection:
            if 'availability' in table_names:
                connection.execute(
                    text('CREATE INDEX IF NOT EXISTS idx_availability_professor_date ON availability(professor_id, date, start_time)')
                )
                connection.execute(
                    text('CREATE INDEX IF NOT EXISTS idx_availability_booked_date ON availability(is_booked, date)')
                )
            if 'appointments' in table_names:
                connection.execute(
                    text('CREATE INDEX IF NOT EXISTS idx_appointments_student_date ON appointments(student_id, date, start_time)')
                )
                connection.execute(
                    text('CREATE INDEX IF NOT EXISTS idx_appointments_professor_date ON appointments(professor_id, date, start_time)')
                )

        _booking_schema_checked = True
