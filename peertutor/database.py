import os
from dotenv import load_dotenv
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker


load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./peertutor.db")

engine = create_engine(DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_booking_schema_checked = False

SCHEMA_INDEXES = {
    'tutor_availability': [
        'CREATE INDEX IF NOT EXISTS idx_availability_tutor_booked_start '
        'ON tutor_availability(tutor_id, is_booked, start_time)',
        'CREATE INDEX IF NOT EXISTS idx_availability_time_range ON tutor_availability(start_time, end_time)',
    ],
    'booking_sessions': [
        'CREATE INDEX IF NOT EXISTS idx_booking_sessions_tutor_range '
        'ON booking_sessions(tutor_id, start_time, end_time)',
        'CREATE INDEX IF NOT EXISTS idx_booking_sessions_student_start ON booking_sessions(student_id, start_time)',
    ],
}


def ensure_booking_schema(bind=None) -> None:
    """Create the lookup indexes on existing tables that predate them."""
    global _booking_schema_checked

    if _booking_schema_checked:
        return

    with _schema_lock:
        if _booking_schema_checked:
            return

        target = bind or engine
        existing_tables = set(inspect(target).get_table_names())

        with target.begin() as connection:
            for table_name, statements in SCHEMA_INDEXES.items():
                if table_name not in existing_tables:
                    continue
                for statement in statements:
                    connection.execute(text(statement))

        _booking_schema_checked = True


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
